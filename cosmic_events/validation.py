"""
Required-field checks for the submitted forms.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

from cosmic_events.errors import RecordValidationError

EVENT_REQUIRED_FIELDS = ("eventPurpose", "guests", "date", "budget")
DASHBOARD_REQUIRED_FIELDS = (
    "eventName",
    "organizer",
    "venue",
    "date",
    "attendees",
    "budget",
)

EVENT_REQUIRED_MESSAGE = "Please fill out all required fields."
DASHBOARD_REQUIRED_MESSAGE = (
    "All fields are required. Please fill out every field before submitting."
)


def _is_missing(value: Any) -> bool:
    # Loose check: empty string, zero and false all count as missing.
    # Containers count as present even when empty.
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def missing_fields(record: Mapping[str, Any], required: Sequence[str]) -> list[str]:
    return [name for name in required if _is_missing(record.get(name))]


def validate_required(
    record: Mapping[str, Any], required: Sequence[str], message: str
) -> None:
    """
    Raise RecordValidationError with ``message`` when any of ``required`` is
    missing from ``record``.
    """
    missing = missing_fields(record, required)
    if missing:
        raise RecordValidationError(message, missing)


def validate_event(record: Mapping[str, Any]) -> None:
    validate_required(record, EVENT_REQUIRED_FIELDS, EVENT_REQUIRED_MESSAGE)


def validate_dashboard(record: Mapping[str, Any]) -> None:
    validate_required(record, DASHBOARD_REQUIRED_FIELDS, DASHBOARD_REQUIRED_MESSAGE)
