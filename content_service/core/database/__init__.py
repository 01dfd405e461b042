"""Database primitives: declarative base, statement filters and store helpers."""

from __future__ import annotations

from .base import (
    Base,
    CreatedAtMixin,
    IntegerPKMixin,
    JSONDocument,
    TimestampMixin,
    UUIDv7PKMixin,
    generate_id,
)
from .exceptions import NotFoundError
from .filters import FilterGroup, Limit, OrderBy, SearchFilter, StatementFilter, WhereFilter
from .repository import BaseRepository
from .store import store_operation, upsert_statement

__all__ = [
    "Base",
    "BaseRepository",
    "CreatedAtMixin",
    "FilterGroup",
    "IntegerPKMixin",
    "JSONDocument",
    "NotFoundError",
    "Limit",
    "OrderBy",
    "SearchFilter",
    "StatementFilter",
    "TimestampMixin",
    "UUIDv7PKMixin",
    "WhereFilter",
    "generate_id",
    "store_operation",
    "upsert_statement",
]
