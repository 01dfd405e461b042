"""FastAPI application factory.

Run with ``uvicorn content_service.app.main:app``.
"""

from __future__ import annotations

from fastapi import FastAPI

from content_service.app.exception_handlers import configure_exception_handlers
from content_service.app.lifespan import lifespan
from content_service.app.middleware import configure_middleware
from content_service.app.router import setup_routers
from content_service.core.settings import get_app_settings


def create_app() -> FastAPI:
    settings = get_app_settings()
    app = FastAPI(
        title=settings.title,
        description=settings.description,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
        **settings.docs_kwargs(),
    )
    configure_exception_handlers(app)
    configure_middleware(app, metrics_enabled=settings.metrics_enabled)
    setup_routers(app, settings)
    return app


app = create_app()
