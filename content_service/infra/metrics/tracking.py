"""Helper functions for tracking business and operational metrics."""

from __future__ import annotations

import logging

from content_service.infra.metrics import business

logger = logging.getLogger(__name__)


# ============================================================================
# Aggregate Views
# ============================================================================


def track_view_refresh(view: str, outcome: str, duration: float) -> None:
    """Record one refresh of an aggregate view.

    Args:
        view: Aggregate collection name (e.g., 'post_aggregates')
        outcome: 'upserted', 'removed' or 'failed'
        duration: Seconds spent in the pipeline and write

    Example:
            track_view_refresh("post_aggregates", "upserted", 0.012)
    """
    business.view_refresh_total.labels(view=view, outcome=outcome).inc()
    business.view_refresh_duration_seconds.labels(view=view).observe(duration)


# ============================================================================
# Reads
# ============================================================================


def track_paginated_query(view: str, kind: str, duration: float, results: int) -> None:
    """Record a paginated read or search.

    Args:
        view: Aggregate collection name
        kind: 'find_all' or 'search'
        duration: Seconds spent executing
        results: Items returned on the page
    """
    business.paginated_query_duration_seconds.labels(view=view, kind=kind).observe(duration)
    business.paginated_query_results.labels(view=view, kind=kind).observe(results)


def track_page_token_rejected(reason: str) -> None:
    """Track a page token that could not be used."""
    business.page_token_rejected_total.labels(reason=reason).inc()
    logger.debug("Page token rejected", extra={"reason": reason})


def track_store_unavailable(operation: str) -> None:
    """Track a transient store failure."""
    business.store_unavailable_total.labels(operation=operation).inc()


# ============================================================================
# Retries
# ============================================================================


def track_retry(operation: str, outcome: str) -> None:
    """Record a retry event: 'retried', 'recovered' or 'exhausted'."""
    business.retry_total.labels(operation=operation, outcome=outcome).inc()


# ============================================================================
# Error Tracking
# ============================================================================


def track_error(error_type: str, endpoint: str, status_code: int) -> None:
    """Track an error returned to a client.

    Example:
        track_error("invalid-field", "/api/v1/posts", 400)
    """
    business.errors_total.labels(
        error_type=error_type,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()


def track_unhandled_exception(exception_type: str, endpoint: str) -> None:
    business.unhandled_exceptions_total.labels(
        exception_type=exception_type,
        endpoint=endpoint,
    ).inc()
