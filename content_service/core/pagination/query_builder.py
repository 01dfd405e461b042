"""Translate pagination requests into keyset-paginated SQL.

Given a view's field-mapping table and a ``PaginationRequest``, the builder:

1. Validates every filter and sort alias (and coerces filter values) before
   touching the store; failures raise ``InvalidFieldError``.
2. Turns filters into equality or range predicates on the mapped paths.
3. Orders by the declared sort keys, then by id in the primary key's
   direction so ties are broken deterministically. With no sort keys the
   order is id descending (ids are time-sortable, so newest first).
4. When the token carries a last id, loads that row's ordering values and
   seeks strictly past them with the same compound ordering.
5. Applies the limit and mints a next token only for full pages.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from content_service.core.database.base import Base
from content_service.core.database.filters import FilterGroup, Limit, OrderBy, WhereFilter
from content_service.core.database.store import store_operation
from content_service.core.exceptions import MalformedTokenError
from content_service.core.pagination.filters import ContinuationFilter, OrderingKey
from content_service.core.pagination.request import PaginationRequest, PaginationResponse
from content_service.core.pagination.token import FilterOperator, SortDirection
from content_service.infra.logging.lazy import get_lazy_logger
from content_service.infra.metrics.tracking import (
    track_page_token_rejected,
    track_paginated_query,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.pagination.fields import FieldMappingTable

_lazy = get_lazy_logger(__name__)


class PaginationQueryBuilder[ModelT: Base]:
    """Keyset pagination over one aggregate table.

    Args:
        fields: Validated alias table of the view.
        name: Collection name used in logs and metrics.

    Example:
        builder = PaginationQueryBuilder(post_fields, name="post_aggregates")
        page = await builder.execute(
            session,
            PaginationRequest(limit=2).with_sort("createdAt", "desc"),
        )
    """

    def __init__(self, fields: FieldMappingTable, *, name: str) -> None:
        self.fields = fields
        self.model: type[ModelT] = fields.model  # type: ignore[assignment]
        self.name = name

    # ──────────────────────────────────────────────────────
    # Translation (pure, no store access)
    # ──────────────────────────────────────────────────────

    def validate(self, request: PaginationRequest) -> None:
        """Check every alias, operator and value in ``request``.

        Raises:
            InvalidFieldError: On the first offending field.
        """
        for sort in request.sort_fields:
            self.fields.resolve(sort.field)
        for flt in request.filters:
            self.fields.coerce(flt.field, flt.value, flt.operator)

    def filter_conditions(self, request: PaginationRequest) -> list[ColumnElement[bool]]:
        """Predicates for the request's filters, in insertion order."""
        self.validate(request)
        conditions = []
        for flt in request.filters:
            value = self.fields.coerce(flt.field, flt.value, flt.operator)
            expr = self.fields.expression(flt.field)
            match flt.operator:
                case FilterOperator.GT:
                    conditions.append(expr > value)
                case FilterOperator.GTE:
                    conditions.append(expr >= value)
                case FilterOperator.LT:
                    conditions.append(expr < value)
                case FilterOperator.LTE:
                    conditions.append(expr <= value)
                case _:
                    conditions.append(expr == value)
        return conditions

    def ordering(self, request: PaginationRequest) -> list[OrderingKey]:
        """Declared sorts left to right, ending with the id.

        An explicit id sort keeps its position and makes later keys
        redundant, since ids are unique. Otherwise the id is appended in the
        primary key's direction as the tie-breaker.
        """
        keys: list[OrderingKey] = []
        for sort in request.sort_fields:
            if sort.field == self.fields.id_alias:
                keys.append((self.fields.id_expression, sort.direction))
                return keys
            keys.append((self.fields.sort_expression(sort.field), sort.direction))
        keys.append((self.fields.id_expression, keys[0][1] if keys else SortDirection.DESC))
        return keys

    def build(
        self,
        request: PaginationRequest,
        *,
        boundary: tuple[Any, ...] | None = None,
        scope: Sequence[ColumnElement[bool]] = (),
    ) -> Select[tuple[ModelT]]:
        """Build the page query; ``boundary`` comes from ``boundary_values``.

        ``scope`` holds route-level conditions that are not client fields
        (e.g. "topics this user follows") and is not carried in page tokens.
        """
        ordering = self.ordering(request)
        filters = [WhereFilter([*self.filter_conditions(request), *scope])]
        if boundary is not None:
            filters.append(ContinuationFilter(ordering, boundary))
        filters.append(
            OrderBy([expr for expr, _ in ordering], [direction.value for _, direction in ordering])
        )
        filters.append(Limit(request.limit))

        stmt = select(self.model).execution_options(populate_existing=True)
        return FilterGroup(filters).apply(stmt)

    # ──────────────────────────────────────────────────────
    # Execution
    # ──────────────────────────────────────────────────────

    async def boundary_values(
        self,
        session: AsyncSession,
        ordering: list[OrderingKey],
        last_resource_id: str,
    ) -> tuple[Any, ...]:
        """Ordering values of the row the previous page ended on.

        Raises:
            MalformedTokenError: If that row no longer exists.
        """
        stmt = select(*[expr for expr, _ in ordering]).where(
            self.fields.id_expression == last_resource_id
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            track_page_token_rejected("boundary_missing")
            raise MalformedTokenError(
                "Page token refers to a resource that no longer exists; restart pagination",
                extra={"page_last_resource_id": last_resource_id},
            )
        return tuple(row)

    async def execute(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        *,
        scope: Sequence[ColumnElement[bool]] = (),
    ) -> PaginationResponse[ModelT]:
        """Run one page of ``request``.

        Raises:
            InvalidFieldError: Before any store access, on bad fields or values.
            MalformedTokenError: If the continuation boundary is gone.
            StoreUnavailableError: On timeout or connection failure.
        """
        self.validate(request)
        started = time.perf_counter()

        async with store_operation(f"{self.name}.find_all"):
            boundary = None
            if request.page_last_resource_id is not None:
                boundary = await self.boundary_values(
                    session, self.ordering(request), request.page_last_resource_id
                )
            stmt = self.build(request, boundary=boundary, scope=scope)
            _lazy.debug(lambda: f"{self.name} page query: {stmt}")
            items = list((await session.scalars(stmt)).all())

        next_token = None
        if items and len(items) == request.limit:
            next_token = request.page_token.next_page_token(str(items[-1].id))

        track_paginated_query(self.name, "find_all", time.perf_counter() - started, len(items))
        return PaginationResponse(items=items, next_page_token=next_token)


__all__ = ["PaginationQueryBuilder"]
