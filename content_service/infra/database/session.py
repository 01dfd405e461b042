"""Database engine and session management (psycopg3 or aiosqlite async drivers)."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from functools import partial
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from sqlalchemy import event, text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from content_service.core.database.base import Base
from content_service.core.database.filters import SQLITE_LOWER_FUNCTION
from content_service.core.settings import get_db_settings
from content_service.infra.metrics.prometheus import database_query_duration_seconds
from content_service.utils.retry import Backoff, retry

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from content_service.core.settings.database import DatabaseSettings

logger = logging.getLogger(__name__)

db_settings = get_db_settings()

# Non-ASCII text stays literal inside stored JSON so LIKE shortlists can match it
_json_serializer = partial(json.dumps, ensure_ascii=False)

_OPERATIONS = ("SELECT", "INSERT", "UPDATE", "DELETE", "BEGIN", "COMMIT", "ROLLBACK")


def build_engine(settings: DatabaseSettings, **overrides: Any) -> AsyncEngine:
    """Create an async engine for ``settings`` with query instrumentation attached.

    Args:
        settings: Database settings providing the URL and pool sizing.
        **overrides: Extra ``create_async_engine`` keyword arguments (e.g. ``poolclass``).
    """
    kwargs = {
        "json_serializer": _json_serializer,
        **settings.sqlalchemy_engine_kwargs(),
        **overrides,
    }
    async_engine = create_async_engine(settings.url, **kwargs)
    _instrument(async_engine, sqlite=settings.is_sqlite)
    return async_engine


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


# ============================================================================
# Query Instrumentation
# ============================================================================


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _instrument(async_engine: AsyncEngine, *, sqlite: bool) -> None:
    sync_engine = async_engine.sync_engine

    if sqlite:
        @event.listens_for(sync_engine, "connect")
        def _configure_sqlite(dbapi_conn: Any, connection_record: Any) -> None:
            _ = connection_record
            # Cascading deletes of engagement rows rely on foreign keys
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            dbapi_conn.create_function(SQLITE_LOWER_FUNCTION, 1, _unicode_lower)

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _before_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: Any
    ) -> None:
        _ = conn, cursor, statement, parameters, executemany
        context._query_start_time = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _after_cursor_execute(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: Any
    ) -> None:
        """Record query duration and link to current trace via exemplar."""
        _ = conn, cursor, parameters, executemany
        duration = time.perf_counter() - context._query_start_time

        statement_upper = (statement or "").lstrip().upper()
        operation = next((op for op in _OPERATIONS if statement_upper.startswith(op)), "UNKNOWN")

        span = trace.get_current_span()
        span_context = span.get_span_context() if span else None
        if span_context is not None and span_context.is_valid:
            database_query_duration_seconds.labels(operation=operation).observe(
                duration, exemplar={"trace_id": format(span_context.trace_id, "032x")}
            )
        else:
            database_query_duration_seconds.labels(operation=operation).observe(duration)

        if duration > 1.0:
            logger.warning(
                "Slow query", extra={"operation": operation, "duration_seconds": round(duration, 3)}
            )


engine = build_engine(db_settings)
AsyncSessionLocal = build_session_factory(engine)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Get async database session.

    Example:
        async with get_async_session() as session:
            result = await session.execute(select(User))
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@retry(
    attempts=db_settings.startup_retry_attempts,
    backoff=Backoff(initial=db_settings.startup_retry_delay, maximum=30.0),
    retry_on=(OperationalError, InterfaceError, OSError, TimeoutError),
)
async def init_database() -> None:
    """Wait until the store answers ``SELECT 1``, backing off between attempts.

    Raises:
        RetryExhaustedError: If the store is still unreachable after the
            configured ``DB_STARTUP_RETRY_ATTEMPTS``.
    """
    url = engine.url.render_as_string(hide_password=True)
    logger.info("Checking database connectivity", extra={"url": url})
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database reachable", extra={"url": url})


async def create_schema(async_engine: AsyncEngine | None = None) -> None:
    """Create all tables without migrations (local runs and tests)."""
    target = async_engine or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema created")


async def close_database() -> None:
    """Dispose the engine. Called during application shutdown."""
    logger.info("Closing database connection")
    await engine.dispose()
    logger.info("Database connection closed successfully")


__all__ = [
    "AsyncSessionLocal",
    "build_engine",
    "build_session_factory",
    "close_database",
    "create_schema",
    "engine",
    "get_async_session",
    "init_database",
]
