"""Entrypoint for the portfolio tracker FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import TrackerSettings, get_settings
from ..core.logging import setup_logging
from ..core.telemetry import setup_telemetry
from .database import Database
from .routes import get_portfolio_router
from .schemas import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await db.create_all()
    yield
    await db.dispose()


def create_app(database: Database | None = None, settings: TrackerSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    database_instance = database or Database(settings.database_url)

    setup_logging(settings.log_level)
    logger.info("Starting %s with settings %s", settings.app_name, settings.dict_for_logging())

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_telemetry(app, settings, database_instance.engine)
    app.include_router(get_portfolio_router(database_instance, settings))

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=settings.telemetry_service_name)

    return app


app = create_app()
