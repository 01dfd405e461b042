"""Cached settings loaders.

Each domain is read from the environment once per process. Tests change
environment variables and then call ``clear_all_caches()``.
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .database import DatabaseSettings
from .logs import LoggingSettings
from .pagination import PaginationSettings
from .search import SearchSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Limits and the page-token signing secret (``PAGINATION_`` prefix)."""
    return PaginationSettings()


@lru_cache(maxsize=1)
def get_search_settings() -> SearchSettings:
    """Fuzzy matching and boost defaults (``SEARCH_`` prefix)."""
    return SearchSettings()


_LOADERS = (
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_pagination_settings,
    get_search_settings,
)


def clear_all_caches() -> None:
    """Forget every loaded settings object; the next call re-reads the environment."""
    for loader in _LOADERS:
        loader.cache_clear()


__all__ = [
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_logging_settings",
    "get_pagination_settings",
    "get_search_settings",
]
