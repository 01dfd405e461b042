"""Database infrastructure: async engine, session factory and lifecycle.

Example:
    from content_service.infra.database import get_async_session

    async with get_async_session() as session:
        result = await session.execute(...)
"""

from __future__ import annotations

from .session import (
    AsyncSessionLocal,
    build_engine,
    build_session_factory,
    close_database,
    create_schema,
    engine,
    get_async_session,
    init_database,
)

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
