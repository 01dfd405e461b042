"""Continuation filter for SQLAlchemy queries.

The ContinuationFilter implements the seek/keyset method:
- Instead of OFFSET, WHERE conditions seek directly past the boundary row
- Results are stable even when data changes between pages
- Works with any combination of sort keys, as long as the last key is unique

How it works:
    For ORDER BY created_at DESC, id DESC with boundary at (t1, id1):
    WHERE (created_at < t1) OR (created_at = t1 AND id < id1)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, and_, or_

from content_service.core.database.filters import StatementFilter
from content_service.core.pagination.token import SortDirection

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

OrderingKey = tuple["ColumnElement[Any]", SortDirection]


class ContinuationFilter(StatementFilter):
    """Restrict a query to rows strictly after a boundary in a compound ordering.

    The ordering expressions must never evaluate to NULL; the field-mapping
    table coalesces document paths for that reason.

    Example:
        stmt = ContinuationFilter(
            ordering=[(created_expr, SortDirection.DESC), (PostAggregate.id, SortDirection.DESC)],
            boundary=("2025-01-15T10:30:00.000000Z", "0190a1b2-..."),
        ).apply(stmt)

    Attributes:
        ordering: (expression, direction) pairs, most significant first
        boundary: Values of those expressions on the last emitted row
    """

    def __init__(self, ordering: Sequence[OrderingKey], boundary: Sequence[Any]) -> None:
        if len(ordering) != len(boundary):
            msg = "boundary must provide one value per ordering key"
            raise ValueError(msg)
        self.ordering = list(ordering)
        self.boundary = list(boundary)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Add the seek condition.

        For keys (a, b, c) with boundary values (v1, v2, v3):
            (a op v1) OR
            (a = v1 AND b op v2) OR
            (a = v1 AND b = v2 AND c op v3)

        Where 'op' is < for descending keys and > for ascending keys.
        """
        if not self.ordering:
            return statement
        return statement.where(self.condition())

    def condition(self) -> ColumnElement[bool]:
        or_conditions = []
        for i, (expr, direction) in enumerate(self.ordering):
            value = self.boundary[i]
            compare = expr < value if direction.is_descending else expr > value
            eq_conditions = [
                prev_expr == self.boundary[j] for j, (prev_expr, _) in enumerate(self.ordering[:i])
            ]
            or_conditions.append(and_(*eq_conditions, compare) if eq_conditions else compare)
        return or_(*or_conditions)


__all__ = ["ContinuationFilter", "OrderingKey"]
