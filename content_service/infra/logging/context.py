"""Per-request log context.

The request middleware binds ``request_id``, ``method`` and ``path``;
the acting-user dependency adds ``user_id``. ``ContextInjectingFilter``
copies the bound values onto every record emitted while handling that
request, so handlers never pass them explicitly.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

_EMPTY: MappingProxyType[str, Any] = MappingProxyType({})

_log_context: ContextVar[MappingProxyType[str, Any]] = ContextVar("log_context", default=_EMPTY)


def set_log_context(**values: Any) -> None:
    """Bind ``values`` for the rest of the current task; existing keys are replaced."""
    _log_context.set(MappingProxyType({**_log_context.get(), **values}))


def get_log_context() -> dict[str, Any]:
    return dict(_log_context.get())


def clear_log_context() -> None:
    _log_context.set(_EMPTY)


class ContextInjectingFilter(logging.Filter):
    """Add bound context to records; attributes already on the record win."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            record.__dict__.setdefault(key, value)
        return True


__all__ = ["ContextInjectingFilter", "clear_log_context", "get_log_context", "set_log_context"]
