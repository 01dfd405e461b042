"""Root logger setup.

Records are formatted off the request path: the root logger gets a single
``QueueHandler`` whose listener thread feeds the console (and optional
rotating file) handlers. The context filter sits on the queue handler so
it runs in the logging task, where the request's contextvars are visible.
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from content_service.core.settings.logs import LoggingSettings

_FORMATTER = "content_service.infra.logging.formatters.JSONFormatter"
_CONTEXT_FILTER = "content_service.infra.logging.context.ContextInjectingFilter"
_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def build_config(settings: LoggingSettings) -> dict[str, Any]:
    """Translate settings into a ``logging.config.dictConfig`` document."""
    formatter = "json" if settings.json_logs else "text"
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter,
            "stream": "ext://sys.stderr",
        },
    }
    if settings.file_path is not None:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": str(settings.file_path),
            "maxBytes": settings.file_max_bytes,
            "backupCount": settings.file_backup_count,
            "encoding": "utf-8",
        }
    handlers["queue"] = {
        "class": "logging.handlers.QueueHandler",
        "handlers": list(handlers),
        "respect_handler_level": True,
        "filters": ["context"] if settings.include_context else [],
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"context": {"()": _CONTEXT_FILTER}},
        "formatters": {
            "json": {"()": _FORMATTER, "static": {"service": settings.service_name}},
            "text": {"format": _TEXT_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": settings.level, "handlers": ["queue"]},
    }


def shutdown() -> None:
    """Drain and stop the queue listener. Safe to call repeatedly."""
    handler = logging.getHandlerByName("queue")
    listener = getattr(handler, "listener", None)
    if isinstance(handler, QueueHandler) and listener is not None:
        listener.stop()
        handler.listener = None


def setup_logging(log_settings: LoggingSettings | None = None, *, force: bool = False) -> None:
    """Configure logging once per process; ``force`` reapplies new settings."""
    global _configured

    if _configured and not force:
        return
    if log_settings is None:
        from content_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    shutdown()
    logging.captureWarnings(log_settings.capture_warnings)
    logging.config.dictConfig(build_config(log_settings))

    handler = logging.getHandlerByName("queue")
    if isinstance(handler, QueueHandler) and handler.listener is not None:
        handler.listener.start()
    if not _configured:
        atexit.register(shutdown)
    _configured = True
