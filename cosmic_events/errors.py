"""
Error types shared by the stores and the HTTP layer.
"""

from __future__ import annotations

from typing import Sequence


class RecordValidationError(ValueError):
    """A submitted record is missing one or more required fields."""

    def __init__(self, message: str, missing: Sequence[str] = ()):
        super().__init__(message)
        self.message = message
        self.missing = list(missing)


class StoreError(Exception):
    """Base class for persistence failures (mapped to HTTP 500)."""


class StorageReadError(StoreError):
    """Stored data could not be read or parsed, or a query failed."""


class StorageWriteError(StoreError):
    """A record could not be persisted."""


class StoreUnavailableError(StoreError):
    """The backing store could not be reached."""
