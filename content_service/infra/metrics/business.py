"""Domain metrics for aggregate views, paginated reads and search."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from content_service.infra.metrics.prometheus import REGISTRY, latency_histogram

# ============================================================================
# Aggregate Views
# ============================================================================

view_refresh_total = Counter(
    "view_refresh_total",
    "Aggregate view refreshes by outcome. "
    "outcome is one of: upserted, removed, failed.",
    ["view", "outcome"],
    registry=REGISTRY,
)

view_refresh_duration_seconds = latency_histogram(
    "view_refresh_duration_seconds",
    "Time spent running a view pipeline and upserting its aggregate",
    ["view"],
)

# ============================================================================
# Paginated Reads and Search
# ============================================================================

paginated_query_duration_seconds = latency_histogram(
    "paginated_query_duration_seconds",
    "Duration of paginated reads against aggregate views",
    ["view", "kind"],
)

paginated_query_results = Histogram(
    "paginated_query_results",
    "Number of items returned per page",
    ["view", "kind"],
    buckets=(0, 1, 5, 10, 20, 50, 100, 500),
    registry=REGISTRY,
)

page_token_rejected_total = Counter(
    "page_token_rejected_total",
    "Page tokens rejected during decode or continuation",
    ["reason"],
    registry=REGISTRY,
)

store_unavailable_total = Counter(
    "store_unavailable_total",
    "Store operations that failed with a transient error",
    ["operation"],
    registry=REGISTRY,
)

# ============================================================================
# Startup Retries
# ============================================================================

retry_total = Counter(
    "retry_total",
    "Retried operations by outcome. outcome is one of: retried, recovered, exhausted.",
    ["operation", "outcome"],
    registry=REGISTRY,
)

# ============================================================================
# Error Metrics
# ============================================================================

errors_total = Counter(
    "errors_total",
    "Application errors returned to clients",
    ["error_type", "endpoint", "status_code"],
    registry=REGISTRY,
)

unhandled_exceptions_total = Counter(
    "unhandled_exceptions_total",
    "Exceptions that reached the catch-all handler",
    ["exception_type", "endpoint"],
    registry=REGISTRY,
)
