"""Startup and shutdown hooks.

Startup: logging and the ``app_info`` metric, then the database
reachability check (retried) and optional schema creation. Shutdown
disposes the engine.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from content_service.core.settings import get_app_settings, get_logging_settings
from content_service.infra.database.session import close_database, create_schema, init_database
from content_service.infra.logging.config import setup_logging
from content_service.infra.metrics.prometheus import app_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_app_settings()
    setup_logging(get_logging_settings(), force=True)
    identity = {
        "service": settings.service_name,
        "version": settings.version,
        "environment": settings.environment,
    }
    app_info.info(identity)
    logger.info("Application starting", extra=identity)

    await init_database()
    if settings.create_schema_on_startup:
        await create_schema()
    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Application shutting down")
        try:
            await close_database()
        except Exception as exc:
            logger.warning("Error closing database engine", extra={"error": str(exc)})


__all__ = ["lifespan"]
