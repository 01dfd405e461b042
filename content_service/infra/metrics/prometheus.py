"""Process-wide Prometheus registry and the HTTP/store metrics.

Everything is registered on ``REGISTRY`` rather than the default global
registry, so importing the app twice (tests, reloaders) never raises
duplicate-timeseries errors. ``GET /metrics`` exposes this registry only.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, Info

REGISTRY = CollectorRegistry()

# 1ms .. 10s
DEFAULT_LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


def latency_histogram(name: str, documentation: str, labels: list[str]) -> Histogram:
    """Histogram on ``REGISTRY`` with the shared latency buckets."""
    return Histogram(
        name, documentation, labels, buckets=DEFAULT_LATENCY_BUCKETS, registry=REGISTRY
    )


# HTTP layer; endpoint is the route template, not the raw path
http_requests_total = Counter(
    "http_requests_total",
    "HTTP requests by route template and status",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)
http_request_duration_seconds = latency_histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)

# Store; observed per cursor execution, with trace exemplars when a span is active
database_query_duration_seconds = latency_histogram(
    "database_query_duration_seconds",
    "Statement execution time by SQL verb",
    ["operation"],
)

app_info = Info("app", "Service name, version and environment", registry=REGISTRY)

__all__ = [
    "DEFAULT_LATENCY_BUCKETS",
    "REGISTRY",
    "app_info",
    "database_query_duration_seconds",
    "http_request_duration_seconds",
    "http_requests_total",
    "latency_histogram",
]
