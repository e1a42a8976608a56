"""
Pydantic schemas for the event collection.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventRecord(BaseModel):
    """Schema enforced by the event store on insert."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    eventPurpose: str = Field(..., min_length=1)
    guests: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    budget: str = Field(..., min_length=1)
    theme: Optional[str] = None
    venue: Optional[str] = None
    foodBeverage: Optional[str] = None
    entertainment: list[str] = Field(default_factory=list)
    decorations: Optional[str] = None

    @field_validator("entertainment", mode="before")
    @classmethod
    def _single_value_as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int, float)):
            return [value]
        return value


EVENT_FIELDS = tuple(EventRecord.model_fields)
LIST_FIELDS = ("entertainment",)
