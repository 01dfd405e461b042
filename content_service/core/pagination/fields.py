"""Field-mapping tables: public aliases to store-native paths.

Each aggregate view declares which aliases clients may filter and sort on,
where each alias lives in the aggregate table and what type its values
have. A path's first segment is a column; further segments are keys inside
that column's JSON document::

    "likeCount" -> "like_count"          (typed column)
    "author"    -> "post.author.id"      (JSON path into the ``post`` snapshot)

Tables are validated once, when the view is constructed, and queried by
alias afterwards; an alias that is not in the table is always an error.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, false, func, literal

from content_service.core.exceptions import InvalidFieldError
from content_service.core.pagination.token import FilterOperator, FilterValue
from content_service.utils.timestamps import normalize_timestamp, parse_timestamp

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from content_service.core.database.base import Base

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


class FieldType(str, Enum):
    """Value type of a mapped field."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"

    @property
    def supports_range(self) -> bool:
        return self in (FieldType.INTEGER, FieldType.NUMBER, FieldType.DATETIME)


@dataclass(frozen=True, slots=True)
class FieldMapping:
    """Where an alias lives and how its values are typed."""

    path: str
    type: FieldType = FieldType.STRING

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("."))

    @property
    def is_document_path(self) -> bool:
        return len(self.segments) > 1


class FieldMappingTable:
    """Validated alias table bound to one aggregate model.

    Args:
        model: Aggregate ORM model the paths resolve against.
        mappings: Alias to mapping. Order is preserved for documentation.
        id_alias: Alias of the primary key, used as the tie-breaker.

    Raises:
        ValueError: If a path is empty, names an unknown column, or walks
            into a column that is not a JSON document.
    """

    def __init__(
        self,
        model: type[Base],
        mappings: Mapping[str, FieldMapping],
        *,
        id_alias: str = "id",
    ) -> None:
        self.model = model
        self._mappings = dict(mappings)
        self.id_alias = id_alias
        self._validate()

    def _validate(self) -> None:
        columns = self.model.__table__.columns
        if self.id_alias not in self._mappings:
            msg = f"{self.model.__name__}: id alias '{self.id_alias}' is not mapped"
            raise ValueError(msg)
        for alias, mapping in self._mappings.items():
            segments = mapping.segments
            if not alias or any(not segment for segment in segments):
                msg = f"{self.model.__name__}: invalid path '{mapping.path}' for alias '{alias}'"
                raise ValueError(msg)
            column = columns.get(segments[0])
            if column is None:
                msg = (
                    f"{self.model.__name__}: alias '{alias}' maps to unknown column "
                    f"'{segments[0]}'"
                )
                raise ValueError(msg)
            if mapping.is_document_path and not isinstance(column.type, JSON):
                msg = (
                    f"{self.model.__name__}: alias '{alias}' walks into non-JSON column "
                    f"'{segments[0]}'"
                )
                raise ValueError(msg)

    # ──────────────────────────────────────────────────────
    # Lookup
    # ──────────────────────────────────────────────────────

    def __contains__(self, alias: object) -> bool:
        return alias in self._mappings

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    @property
    def aliases(self) -> tuple[str, ...]:
        return tuple(self._mappings)

    def resolve(self, alias: str) -> FieldMapping:
        """Return the mapping for ``alias``.

        Raises:
            InvalidFieldError: If the alias is not declared.
        """
        try:
            return self._mappings[alias]
        except KeyError:
            raise InvalidFieldError(
                alias,
                detail=f"Unknown field '{alias}'. Allowed fields: {', '.join(self._mappings)}",
            ) from None

    # ──────────────────────────────────────────────────────
    # Expressions
    # ──────────────────────────────────────────────────────

    def expression(self, alias: str) -> ColumnElement[Any]:
        """Typed SQL expression for ``alias`` (column or JSON path)."""
        mapping = self.resolve(alias)
        head, *rest = mapping.segments
        column = getattr(self.model, head)
        if not rest:
            return column

        element = column[rest[0]] if len(rest) == 1 else column[tuple(rest)]
        match mapping.type:
            case FieldType.INTEGER:
                return element.as_integer()
            case FieldType.NUMBER:
                return element.as_float()
            case FieldType.BOOLEAN:
                return element.as_boolean()
            case _:
                return element.as_string()

    def sort_expression(self, alias: str) -> ColumnElement[Any]:
        """Expression used for ordering and keyset comparison.

        JSON paths may be missing from a document; they are coalesced to a
        type default so ordering and the continuation predicate agree.
        """
        mapping = self.resolve(alias)
        expr = self.expression(alias)
        if not mapping.is_document_path:
            return expr
        match mapping.type:
            case FieldType.INTEGER | FieldType.NUMBER:
                return func.coalesce(expr, literal(0))
            case FieldType.BOOLEAN:
                return func.coalesce(expr, false())
            case _:
                return func.coalesce(expr, literal(""))

    @property
    def id_expression(self) -> ColumnElement[Any]:
        return self.expression(self.id_alias)

    # ──────────────────────────────────────────────────────
    # Values
    # ──────────────────────────────────────────────────────

    def coerce(self, alias: str, value: FilterValue, operator: FilterOperator) -> Any:
        """Validate ``operator`` for ``alias`` and convert ``value`` to the field type.

        Raises:
            InvalidFieldError: On unknown alias, range operator on a
                non-orderable field, or a value of the wrong type.
        """
        mapping = self.resolve(alias)
        if operator.is_range and not mapping.type.supports_range:
            raise InvalidFieldError(
                alias,
                detail=(
                    f"Operator '{operator.value}' is not supported for "
                    f"{mapping.type.value} field '{alias}'"
                ),
            )
        try:
            coerced = _coerce(mapping.type, value)
            if mapping.type is FieldType.DATETIME and not mapping.is_document_path:
                return parse_timestamp(coerced)
            return coerced
        except (TypeError, ValueError) as exc:
            raise InvalidFieldError(
                alias,
                detail=f"Value {value!r} is not a valid {mapping.type.value} for field '{alias}'",
            ) from exc


def _coerce(field_type: FieldType, value: FilterValue) -> Any:
    match field_type:
        case FieldType.STRING:
            if not isinstance(value, str):
                raise TypeError(type(value).__name__)
            return value
        case FieldType.INTEGER:
            if isinstance(value, bool):
                raise TypeError("bool")
            if isinstance(value, float):
                if not value.is_integer():
                    raise ValueError(value)
                return int(value)
            return int(value)
        case FieldType.NUMBER:
            if isinstance(value, bool):
                raise TypeError("bool")
            number = float(value)
            if not math.isfinite(number):
                raise ValueError(value)
            return number
        case FieldType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
            raise ValueError(value)
        case FieldType.DATETIME:
            if not isinstance(value, str):
                raise TypeError(type(value).__name__)
            return normalize_timestamp(value)
    raise ValueError(field_type)


__all__ = ["FieldMapping", "FieldMappingTable", "FieldType"]
