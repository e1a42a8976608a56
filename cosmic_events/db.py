"""
Event collection access: MongoDB, SQLAlchemy and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import re
import time
import uuid
from typing import Any, Mapping, Optional, Protocol

from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from sqlalchemy import JSON, Column, Float, String, create_engine, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from cosmic_events.errors import (
    StorageReadError,
    StorageWriteError,
    StoreUnavailableError,
)
from cosmic_events.schemas import EVENT_FIELDS, LIST_FIELDS, EventRecord
from cosmic_events.validation import validate_event


class EventStore(Protocol):
    """Interface for the event collection."""

    def ping(self) -> None:
        ...

    def insert(self, record: Mapping[str, Any]) -> dict:
        ...

    def find(self, filters: Mapping[str, Any]) -> list[dict]:
        ...


def normalize_filters(filters: Mapping[str, Any]) -> dict[str, str]:
    """Keep only non-empty string filter values."""
    return {
        field: value
        for field, value in filters.items()
        if isinstance(value, str) and value
    }


def _has_unknown_field(filters: Mapping[str, str]) -> bool:
    # Fields outside the schema never hold a string, so they match nothing.
    return any(field not in EVENT_FIELDS for field in filters)


def prepare_event(record: Mapping[str, Any]) -> dict:
    """
    Check required fields, then apply the collection schema.

    Raises RecordValidationError for missing fields and StorageWriteError when
    the schema rejects the record.
    """
    validate_event(record)
    try:
        event = EventRecord.model_validate(dict(record))
    except ValidationError as exc:
        raise StorageWriteError(f"Event rejected by schema: {exc}") from exc
    return event.model_dump(exclude_none=True)


def _contains(value: Any, needle: str) -> bool:
    if isinstance(value, list):
        return any(_contains(item, needle) for item in value)
    if isinstance(value, str):
        return needle.casefold() in value.casefold()
    return False


class InMemoryEventStore:
    """Simple in-memory event collection for development and tests."""

    def __init__(self):
        self.events: list[dict] = []

    def ping(self) -> None:
        return None

    def insert(self, record: Mapping[str, Any]) -> dict:
        event = prepare_event(record)
        event["_id"] = uuid.uuid4().hex
        self.events.append(event)
        return copy.deepcopy(event)

    def find(self, filters: Mapping[str, Any]) -> list[dict]:
        active = normalize_filters(filters)
        if _has_unknown_field(active):
            return []
        return [
            copy.deepcopy(event)
            for event in self.events
            if all(_contains(event.get(f), v) for f, v in active.items())
        ]

    def reset(self) -> None:
        """Clear all stored events (useful in tests)."""
        self.events.clear()


def build_mongo_query(filters: Mapping[str, str]) -> dict:
    """
    Translate filters into a case-insensitive substring query. Values are
    escaped so they are matched literally rather than as patterns.
    """
    return {
        field: {"$regex": re.escape(value), "$options": "i"}
        for field, value in filters.items()
    }


def _serialize_document(doc: Mapping[str, Any]) -> dict:
    data = dict(doc)
    if "_id" in data:
        data["_id"] = str(data["_id"])
    return data


class MongoEventStore:
    """
    pymongo-backed implementation. The client is created once and shared by
    all requests.
    """

    def __init__(
        self,
        uri: str,
        database: str = "Cosmic",
        collection: str = "events",
        timeout_ms: int = 5000,
        client: Optional[MongoClient] = None,
    ):
        if not uri and client is None:
            raise ValueError("MONGODB_URI is required for MongoEventStore")
        self.client = client or MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self.collection = self.client[database][collection]

    def ping(self) -> None:
        try:
            self.client.admin.command("ping")
        except PyMongoError as exc:
            raise StoreUnavailableError("MongoDB is unreachable") from exc

    def insert(self, record: Mapping[str, Any]) -> dict:
        doc = prepare_event(record)
        try:
            # insert_one sets doc["_id"] to the generated ObjectId.
            self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise StorageWriteError("MongoDB insert failed") from exc
        return _serialize_document(doc)

    def find(self, filters: Mapping[str, Any]) -> list[dict]:
        active = normalize_filters(filters)
        if _has_unknown_field(active):
            return []
        try:
            docs = list(self.collection.find(build_mongo_query(active)))
        except PyMongoError as exc:
            raise StorageReadError("MongoDB query failed") from exc
        return [_serialize_document(doc) for doc in docs]


def _like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlEventStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlEventStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Cannot initialise events table") from exc

    def _to_event(self, row: "EventRow") -> dict:
        event: dict[str, Any] = {"_id": row.id}
        for field in EVENT_FIELDS:
            value = getattr(row, field)
            if value is not None:
                event[field] = value
        return event

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Database is unreachable") from exc

    def insert(self, record: Mapping[str, Any]) -> dict:
        event = prepare_event(record)
        try:
            with self.Session() as session:
                row = EventRow(id=uuid.uuid4().hex, created_at=time.time(), **event)
                session.add(row)
                session.commit()
                return self._to_event(row)
        except SQLAlchemyError as exc:
            raise StorageWriteError("Database insert failed") from exc

    def find(self, filters: Mapping[str, Any]) -> list[dict]:
        active = normalize_filters(filters)
        if _has_unknown_field(active):
            return []
        stmt = select(EventRow).order_by(EventRow.created_at.asc())
        list_filters = {}
        for field, value in active.items():
            if field in LIST_FIELDS:
                list_filters[field] = value
            else:
                column = getattr(EventRow, field)
                stmt = stmt.where(column.ilike(_like_pattern(value), escape="\\"))
        try:
            with self.Session() as session:
                rows = session.execute(stmt).scalars().all()
                events = [self._to_event(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageReadError("Database query failed") from exc
        # JSON list columns are matched per element here rather than in SQL.
        return [
            event
            for event in events
            if all(_contains(event.get(f), v) for f, v in list_filters.items())
        ]


Base = declarative_base()


class EventRow(Base):
    __tablename__ = "events"

    id = Column("_id", String, primary_key=True)
    eventPurpose = Column(String, nullable=False)
    guests = Column(String, nullable=False)
    date = Column(String, nullable=False)
    budget = Column(String, nullable=False)
    theme = Column(String, nullable=True)
    venue = Column(String, nullable=True)
    foodBeverage = Column(String, nullable=True)
    entertainment = Column(JSON, nullable=False, default=list)
    decorations = Column(String, nullable=True)
    created_at = Column(Float, nullable=False, index=True)
