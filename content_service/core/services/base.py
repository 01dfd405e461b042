"""Base class for write-side services."""

from __future__ import annotations

import logging

from content_service.infra.logging import get_lazy_logger


class BaseService:
    """Gives each service a logger named after its class.

    ``self.logger`` is for INFO and above; ``self._lazy`` takes callables
    for DEBUG messages that are only built when DEBUG is enabled.
    """

    def __init__(self) -> None:
        name = f"service.{type(self).__name__}"
        self.logger = logging.getLogger(name)
        self._lazy = get_lazy_logger(name)
