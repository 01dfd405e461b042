"""Composable statement filters.

Each filter takes a ``Select`` and returns a narrowed one. They accept
arbitrary column expressions, so JSON paths into aggregate snapshots
filter and sort like ordinary columns.

Example:
    stmt = FilterGroup([
        WhereFilter([PostAggregate.topic_id == topic_id]),
        OrderBy([PostAggregate.like_count, PostAggregate.id], ["desc", "desc"]),
        Limit(20),
    ]).apply(select(PostAggregate))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Literal

from sqlalchemy import ColumnElement, Select, String, and_, or_
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

Direction = Literal["asc", "desc"]

# SQLite's built-in lower() only folds ASCII; connections register this name
SQLITE_LOWER_FUNCTION = "unicode_lower"


class lower_text(FunctionElement[str]):  # noqa: N801
    """Unicode-aware ``lower()`` matching Python's ``str.lower``."""

    type = String()
    name = "lower_text"
    inherit_cache = True


@compiles(lower_text)
def _lower_text(element: lower_text, compiler: Any, **kw: Any) -> str:
    return f"lower({compiler.process(element.clauses, **kw)})"


@compiles(lower_text, "sqlite")
def _lower_text_sqlite(element: lower_text, compiler: Any, **kw: Any) -> str:
    return f"{SQLITE_LOWER_FUNCTION}({compiler.process(element.clauses, **kw)})"


class StatementFilter(ABC):
    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]: ...


class WhereFilter(StatementFilter):
    """AND of prebuilt conditions; a no-op when there are none."""

    def __init__(self, conditions: Sequence[ColumnElement[bool]]) -> None:
        self.conditions = list(conditions)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        return statement.where(and_(*self.conditions)) if self.conditions else statement


class SearchFilter(StatementFilter):
    """Rows where some field contains some term, case-insensitively (Unicode-aware).

    ``LIKE`` wildcards inside the terms are escaped. Used to shortlist
    fuzzy-search candidates, not to rank them.
    """

    def __init__(self, fields: Sequence[ColumnElement[Any]], terms: Sequence[str]) -> None:
        self.fields = list(fields)
        self.terms = [term.lower() for term in terms if term]

    def apply(self, statement: Select[Any]) -> Select[Any]:
        if not (self.fields and self.terms):
            return statement
        return statement.where(
            or_(
                *(
                    lower_text(field).contains(term, autoescape=True)
                    for field in self.fields
                    for term in self.terms
                )
            )
        )


class OrderBy(StatementFilter):
    """Sort by ``fields``, most significant first, one direction per field."""

    def __init__(
        self,
        fields: Sequence[ColumnElement[Any]],
        directions: Direction | Sequence[Direction] = "asc",
    ) -> None:
        self.fields = list(fields)
        if isinstance(directions, str):
            directions = [directions] * len(self.fields)
        if len(directions) != len(self.fields):
            msg = f"{len(self.fields)} sort fields but {len(directions)} directions"
            raise ValueError(msg)
        self.directions = list(directions)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        return statement.order_by(
            *(
                field.desc() if direction == "desc" else field.asc()
                for field, direction in zip(self.fields, self.directions, strict=True)
            )
        )


class Limit(StatementFilter):
    def __init__(self, limit: int) -> None:
        self.limit = limit

    def apply(self, statement: Select[Any]) -> Select[Any]:
        return statement.limit(self.limit)


class FilterGroup(StatementFilter):
    """Apply ``filters`` in order."""

    def __init__(self, filters: Sequence[StatementFilter]) -> None:
        self.filters = list(filters)

    def apply(self, statement: Select[Any]) -> Select[Any]:
        for statement_filter in self.filters:
            statement = statement_filter.apply(statement)
        return statement


__all__ = [
    "SQLITE_LOWER_FUNCTION",
    "Direction",
    "FilterGroup",
    "Limit",
    "OrderBy",
    "SearchFilter",
    "StatementFilter",
    "WhereFilter",
    "lower_text",
]
