"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import asyncio
import logging
import os
from datetime import timedelta
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import create_session, init_db
from .routers import comments_router, users_router, videos_router
from .services import ReconciliationError, run_reconciliation

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version
DISABLE_RECONCILIATION = settings.disable_reconciliation or os.getenv("PYTEST_CURRENT_TEST") is not None

app = FastAPI(
    title=APP_NAME,
    version=API_VERSION,
    description="API for the V-Streamer video sharing backend",
    docs_url="/api-docs",
)

if settings.cors_origins:
    origins: Iterable[str] = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
else:
    origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)
app.include_router(videos_router)
app.include_router(comments_router)

_RECONCILE_INTERVAL = timedelta(hours=settings.reconcile_interval_hours)
_reconcile_task: asyncio.Task[None] | None = None
_reconcile_stop = asyncio.Event()


async def _run_reconciliation_once() -> None:
    """Execute a single counter reconciliation pass in a worker thread."""

    try:
        await asyncio.to_thread(run_reconciliation, create_session)
    except ReconciliationError:
        logger.exception("Scheduled counter reconciliation failed")
    except Exception:
        logger.exception("Unexpected error during counter reconciliation run")


async def _reconcile_loop() -> None:
    while not _reconcile_stop.is_set():
        await _run_reconciliation_once()
        try:
            await asyncio.wait_for(_reconcile_stop.wait(), timeout=_RECONCILE_INTERVAL.total_seconds())
        except asyncio.TimeoutError:
            continue


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the schema exists and schedule counter reconciliation."""

    try:
        init_db()
    except Exception:
        logger.exception("Database initialisation failed")
        raise

    if DISABLE_RECONCILIATION:
        logger.info("Counter reconciliation disabled")
        return

    global _reconcile_task
    if _reconcile_task is None or _reconcile_task.done():
        _reconcile_stop.clear()
        _reconcile_task = asyncio.create_task(_reconcile_loop())


@app.on_event("shutdown")
async def _shutdown() -> None:
    if _reconcile_task is None:
        return

    _reconcile_stop.set()
    try:
        await _reconcile_task
    except asyncio.CancelledError:  # pragma: no cover
        pass


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
