"""Deferred debug messages for hot paths.

Pipeline stages, compiled keyset queries and search ranking log at DEBUG
on every request. Passing a callable instead of a string defers building
the message until the level is known to be enabled::

    _lazy = get_lazy_logger(__name__)
    _lazy.debug(lambda: f"{stage} -> {len(documents)} document(s)")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

type Message = str | Callable[[], str]


class LazyLoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """``LoggerAdapter`` whose message (and args) may be zero-argument callables."""

    def log(self, level: int, msg: Message, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        resolved = msg() if callable(msg) else msg
        resolved_args = tuple(arg() if callable(arg) else arg for arg in args)
        super().log(level, resolved, *resolved_args, **kwargs)

    def debug(self, msg: Message, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)


def get_lazy_logger(name: str, context: Mapping[str, Any] | None = None) -> LazyLoggerAdapter:
    """Lazy adapter over ``logging.getLogger(name)``; ``context`` is bound as ``extra``."""
    return LazyLoggerAdapter(logging.getLogger(name), dict(context or {}))


__all__ = ["LazyLoggerAdapter", "get_lazy_logger"]
