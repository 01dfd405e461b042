"""Cursor pagination over aggregate views.

Provides:
    - PageToken / PageTokenCodec: signed, self-describing continuation tokens
    - PaginationRequest / PaginationResponse: request and page contracts
    - FieldMappingTable: validated alias -> store path tables
    - PaginationQueryBuilder: keyset-paginated SQL with deterministic ordering
"""

from __future__ import annotations

from .fields import FieldMapping, FieldMappingTable, FieldType
from .filters import ContinuationFilter
from .query_builder import PaginationQueryBuilder
from .request import PaginationRequest, PaginationResponse
from .token import (
    FilterField,
    FilterOperator,
    PageToken,
    PageTokenCodec,
    SortDirection,
    SortField,
    decode,
    encode,
)

__all__ = [
    "ContinuationFilter",
    "FieldMapping",
    "FieldMappingTable",
    "FieldType",
    "FilterField",
    "FilterOperator",
    "PageToken",
    "PageTokenCodec",
    "PaginationQueryBuilder",
    "PaginationRequest",
    "PaginationResponse",
    "SortDirection",
    "SortField",
    "decode",
    "encode",
]
