"""Structured logging infrastructure.

Usage:
    from content_service.infra.logging import setup_logging, set_log_context

    setup_logging()
    set_log_context(request_id="abc-123")
"""

from __future__ import annotations

from .config import build_config, setup_logging, shutdown
from .context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from .formatters import JSONFormatter
from .lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "build_config",
    "clear_log_context",
    "get_lazy_logger",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
