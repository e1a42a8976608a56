"""
HTTP routes for form submissions and the event query endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from cosmic_events.config import Settings, get_settings
from cosmic_events.db import EventStore
from cosmic_events.dependencies import get_event_store, get_file_store
from cosmic_events.errors import RecordValidationError
from cosmic_events.file_store import JsonFileStore
from cosmic_events.validation import validate_dashboard

logger = logging.getLogger(__name__)

router = APIRouter()

CONTACT_SAVED = "Contact Data Saved Successfully!"
EVENT_SAVED = "Event Data Saved to MongoDB Successfully!"
DASHBOARD_SAVED = "Dashboard Data Submitted Successfully!"
SERVER_ERROR = "Server Error"
INVALID_BODY = "Invalid request body"


async def read_submission(request: Request) -> dict[str, Any]:
    """
    Return the submitted fields from a JSON or form body.

    Repeated form keys become lists so checkbox groups keep every value.
    Requests without a recognised body yield an empty mapping.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError as exc:
            raise RecordValidationError(INVALID_BODY) from exc
        if not isinstance(payload, dict):
            raise RecordValidationError(INVALID_BODY)
        return payload

    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        record: dict[str, Any] = {}
        for key in form.keys():
            values = [v for v in form.getlist(key) if not isinstance(v, UploadFile)]
            if not values:
                continue
            record[key] = values[0] if len(values) == 1 else values
        return record

    return {}


@router.post("/contactone", response_class=PlainTextResponse)
async def save_contact(
    request: Request,
    files: JsonFileStore = Depends(get_file_store),
    settings: Settings = Depends(get_settings),
):
    record = await read_submission(request)
    await run_in_threadpool(files.append, settings.contact_path, record)
    return PlainTextResponse(CONTACT_SAVED)


@router.post("/formdata", response_class=PlainTextResponse)
async def save_event(
    request: Request,
    store: EventStore = Depends(get_event_store),
):
    """
    Store an event-planning request. Missing required fields are rejected by
    the store before anything is written.
    """
    record = await read_submission(request)
    event = await run_in_threadpool(store.insert, record)
    logger.info("New event saved: %s", event)
    return PlainTextResponse(EVENT_SAVED)


@router.post("/dashboard-submit", response_class=PlainTextResponse)
async def save_dashboard_entry(
    request: Request,
    files: JsonFileStore = Depends(get_file_store),
    settings: Settings = Depends(get_settings),
):
    record = await read_submission(request)
    validate_dashboard(record)
    await run_in_threadpool(files.append, settings.dashboard_path, record)
    logger.info("New dashboard entry: %s", record)
    return PlainTextResponse(DASHBOARD_SAVED)


@router.get("/events")
async def list_events(
    request: Request,
    store: EventStore = Depends(get_event_store),
):
    filters = dict(request.query_params)
    events = await run_in_threadpool(store.find, filters)
    return JSONResponse(events)


@router.get("/health")
def health(store: EventStore = Depends(get_event_store)):
    return {"status": "ok", "event_store": store.__class__.__name__}
