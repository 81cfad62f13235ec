"""FastAPI control server for the picker UI.

Exposes the engine's public operations over local HTTP:

    GET  /health                    -> {"status": "ok", "state": "idle"}
    GET  /apps                      -> {"ok": true, "items": [...], "error": null}
    POST /session/start             <- {"app": "Notes", "duration_min": 15}
    POST /session/end               <- {"reason": "manual"}
    GET  /session                   -> current SessionStatus
    GET  /session/last-end-reason   -> {"reason": "timer"} (one-shot)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel, Field

from blinders import __version__
from blinders.domain.models import (
    EndReason,
    EndResult,
    SessionState,
    SessionStatus,
    StartResult,
)
from blinders.engine.session import SessionEngine
from blinders.windows.base import WindowControlError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class StartRequest(BaseModel):
    app: str = Field(min_length=1, description="Application to focus")
    duration_min: float | str | None = Field(
        default=None, description="Minutes, or null / 'done' for an open-ended session"
    )


class EndRequest(BaseModel):
    reason: EndReason = Field(default=EndReason.MANUAL)


class AppsResponse(BaseModel):
    ok: bool
    items: list[str] = Field(default_factory=list)
    error: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    state: SessionState = SessionState.IDLE


class LastEndReasonResponse(BaseModel):
    reason: EndReason | None = None


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(engine: SessionEngine) -> FastAPI:
    """Create the control API bound to ``engine``.

    Shutting the app down tears down any live session.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Control API started")
        yield
        await app.state.engine.close()
        logger.info("Control API stopped")

    app = FastAPI(
        title="blinders control API",
        description="Local control surface for the focus lock engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = engine

    @app.get("/health")
    async def health_check() -> HealthResponse:
        return HealthResponse(state=app.state.engine.state)

    @app.get("/apps")
    async def list_apps() -> AppsResponse:
        try:
            items = await app.state.engine.list_apps()
        except WindowControlError as e:
            logger.warning("Listing apps failed: %s", e)
            return AppsResponse(ok=False, error=str(e))
        logger.info("Listed %d apps", len(items))
        return AppsResponse(ok=True, items=items)

    @app.post("/session/start")
    async def start_session(request: StartRequest) -> StartResult:
        return await app.state.engine.start_session(request.app, request.duration_min)

    @app.post("/session/end")
    async def end_session(request: EndRequest | None = None) -> EndResult:
        reason = request.reason if request is not None else EndReason.MANUAL
        return await app.state.engine.end_session(reason)

    @app.get("/session")
    async def session_status() -> SessionStatus:
        return app.state.engine.status()

    @app.get("/session/last-end-reason")
    async def last_end_reason() -> LastEndReasonResponse:
        return LastEndReasonResponse(reason=app.state.engine.take_last_end_reason())

    return app
