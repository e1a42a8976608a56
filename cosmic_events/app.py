"""
FastAPI application entry point for the event site backend.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from cosmic_events import pages, routes
from cosmic_events.config import get_settings
from cosmic_events.dependencies import get_event_store, get_file_store
from cosmic_events.errors import RecordValidationError, StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the JSON files and check the event store before serving. A store
    that cannot be reached aborts start-up.
    """
    settings = get_settings()
    files = get_file_store()
    for path in (settings.contact_path, settings.event_path, settings.dashboard_path):
        files.ensure_file(path)

    store = get_event_store()
    store.ping()
    logger.info("Connected to event store (%s)", store.__class__.__name__)
    yield


async def log_requests(request: Request, call_next):
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    logger.info("%s %s", request.method, url)
    return await call_next(request)


async def handle_validation_error(request: Request, exc: RecordValidationError):
    logger.info(
        "%s %s rejected: %s (missing: %s)",
        request.method,
        request.url.path,
        exc.message,
        ", ".join(exc.missing) or "-",
    )
    return PlainTextResponse(exc.message, status_code=400)


async def handle_store_error(request: Request, exc: StoreError):
    logger.error(
        "%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return PlainTextResponse(routes.SERVER_ERROR, status_code=500)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Cosmic Events Backend", version="0.1.0", lifespan=lifespan)
    app.state.templates = Jinja2Templates(directory=settings.templates_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(RecordValidationError, handle_validation_error)
    app.add_exception_handler(StoreError, handle_store_error)

    app.include_router(routes.router)
    app.include_router(pages.router)
    if os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
    return app


app = create_app()
