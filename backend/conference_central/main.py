# backend/conference_central/main.py
from __future__ import annotations

"""
FastAPI application setup.

This module depends on:
- conference_central.config.get_settings for configuration
- conference_central.db.session for engine/session wiring and Base
- conference_central.services.dispatch for the task queue
- conference_central.api.build_api_router for route registration
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conference_central.api import build_api_router
from conference_central.config import Settings, get_settings
from conference_central.db.session import Base, build_engine, build_session_factory
from conference_central.errors import ConferenceCentralError
from conference_central.services.dispatch import (
    TaskDispatcher,
    TaskQueue,
    build_task_queue,
)
from conference_central.services.statsig_client import ProductEvents

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConferenceCentralError)
    async def _conference_error_handler(
        request: Request, exc: ConferenceCentralError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.to_public_dict())


def create_app(
    settings: Settings | None = None,
    *,
    task_queue: TaskQueue | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    # ---- Wiring ----

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.dispatcher = TaskDispatcher(task_queue or build_task_queue(settings))
    app.state.events = ProductEvents.from_settings(settings)

    # ---- CORS ----

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Routes ----

    register_exception_handlers(app)
    app.include_router(build_api_router(), prefix=settings.api_prefix)

    # ---- Lifecycle ----

    @app.on_event("startup")
    def on_startup() -> None:
        """
        Initialize database schema on startup.

        Deployments with a managed schema can run migrations instead; this
        keeps the service runnable out of the box.
        """
        Base.metadata.create_all(bind=engine)

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        app.state.events.shutdown()
        engine.dispose()

    # ---- Healthcheck ----

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
