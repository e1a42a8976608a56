"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from cosmic_events.config import get_settings
from cosmic_events.db import (
    EventStore,
    InMemoryEventStore,
    MongoEventStore,
    SqlEventStore,
)
from cosmic_events.file_store import JsonFileStore

logger = logging.getLogger(__name__)

_event_store: EventStore | None = None
_file_store: JsonFileStore | None = None


def get_event_store() -> EventStore:
    """
    Return a singleton event store so the connection is shared across requests.
    """
    global _event_store
    if _event_store:
        return _event_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _event_store = InMemoryEventStore()
    elif settings.mongodb_uri:
        _event_store = MongoEventStore(
            settings.mongodb_uri,
            database=settings.mongodb_database,
            collection=settings.mongodb_collection,
            timeout_ms=settings.mongodb_timeout_ms,
        )
    elif settings.database_url:
        _event_store = SqlEventStore(settings.database_url)
    else:
        logger.warning(
            "Neither MONGODB_URI nor DATABASE_URL is set; events are kept in memory"
        )
        _event_store = InMemoryEventStore()
    return _event_store


def get_file_store() -> JsonFileStore:
    """
    Return the shared file store; its per-path locks only work if every
    request goes through the same instance.
    """
    global _file_store
    if _file_store:
        return _file_store
    _file_store = JsonFileStore()
    return _file_store
