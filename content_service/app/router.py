"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from content_service.core.settings import get_app_settings
from content_service.features.me.router import router as me_router
from content_service.features.metrics.router import router as metrics_router
from content_service.features.posts.router import router as posts_router
from content_service.features.topics.router import router as topics_router
from content_service.features.users.router import router as users_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from content_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API prefix
            and the metrics toggle.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # Metrics endpoint (no prefix - accessible at /metrics)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(topics_router, prefix=api_prefix)
    app.include_router(posts_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)
    app.include_router(me_router, prefix=api_prefix)

    logger.info("Routers registered", extra={"api_prefix": api_prefix})


__all__ = ["setup_routers"]
