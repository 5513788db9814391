"""Async engine and session factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core import ConfigurationError, settings

logger = logging.getLogger(__name__)


def _log_engine_error(context: Any) -> None:
    logger.error(
        "Database error",
        extra={
            "statement": context.statement,
            "is_disconnect": context.is_disconnect,
        },
        exc_info=context.original_exception,
    )


def create_engine_for_url(database_url: str | None) -> AsyncEngine:
    """Create an async engine that reports runtime driver errors to the log."""
    if not database_url:
        raise ConfigurationError("DATABASE_URL is not configured")
    engine = create_async_engine(database_url, pool_pre_ping=True)
    event.listen(engine.sync_engine, "handle_error", _log_engine_error)
    return engine


@lru_cache
def get_engine() -> AsyncEngine:
    return create_engine_for_url(settings.database_url)


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a database session for one request."""
    async with get_session_maker()() as session:
        yield session


async def check_database_connection(engine: AsyncEngine | None = None) -> None:
    """Round-trip a trivial query; raises when the database is unreachable."""
    engine = engine or get_engine()
    async with engine.connect() as connection:
        await connection.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
