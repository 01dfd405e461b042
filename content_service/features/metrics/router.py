"""Prometheus metrics endpoint.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    HTTP:
        - http_requests_total / http_request_duration_seconds
    Database:
        - database_query_duration_seconds (with trace exemplars)
    Views and pagination:
        - view_refresh_total / view_refresh_duration_seconds
        - paginated_query_duration_seconds / paginated_query_results
        - page_token_rejected_total / store_unavailable_total
    Errors:
        - errors_total / unhandled_exceptions_total
    Application:
        - app_info
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from content_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


__all__ = ["router"]
