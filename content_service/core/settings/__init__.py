"""Settings per concern, each read from its own environment prefix.

Always go through the cached loaders:
    from content_service.core.settings import get_pagination_settings

Precedence: init kwargs, then environment variables, then ``.env``.
"""

from __future__ import annotations

from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_pagination_settings,
    get_search_settings,
)

__all__ = [
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_pagination_settings",
    "get_search_settings",
]
