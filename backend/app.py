"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.v1 import api_router
from core import ConfigurationError, Settings, get_settings
from db.session import check_database_connection, create_engine_for_url, dispose_engine

logger = logging.getLogger(__name__)


async def verify_startup(config: Settings) -> None:
    """Refuse to start unless configuration is complete and the database answers."""
    try:
        config.require_runtime()
    except ConfigurationError as exc:
        logger.critical("Invalid configuration: %s", exc)
        raise
    engine = create_engine_for_url(config.database_url)
    try:
        await check_database_connection(engine)
    except Exception:
        logger.critical("Database connection failed; refusing to start")
        raise
    finally:
        await engine.dispose()
    logger.info("Database connection established")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await verify_startup(app.state.settings)
    try:
        yield
    finally:
        await dispose_engine()


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or get_settings()
    application = FastAPI(title=config.app_name, lifespan=lifespan)
    application.state.settings = config

    if config.cors_origins:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @application.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    application.include_router(api_router)
    return application
