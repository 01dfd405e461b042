"""Middleware configuration for FastAPI application."""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from content_service.infra.logging import clear_log_context, set_log_context
from content_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_total,
)

if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.middleware.base import RequestResponseEndpoint
    from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request id and bind it to the log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        clear_log_context()
        set_log_context(request_id=request_id, method=request.method, path=request.url.path)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counts and latency per route template."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        http_requests_total.labels(
            method=request.method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
            duration
        )
        response.headers["X-Process-Time"] = f"{duration:.6f}"
        return response


def configure_middleware(app: FastAPI, *, metrics_enabled: bool = True) -> None:
    """Install middleware; the last added runs first."""
    if metrics_enabled:
        app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    logger.debug("Middleware configured", extra={"metrics_enabled": metrics_enabled})


__all__ = ["MetricsMiddleware", "RequestIDMiddleware", "configure_middleware"]
