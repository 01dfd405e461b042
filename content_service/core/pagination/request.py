"""Pagination request and response contracts.

A request is a limit plus a page token. The token holds the filters, sort
fields and the last emitted id, so a request rebuilt from a client-echoed
token alone reproduces the original query.

Query-parameter convention (see ``PaginationRequest.from_query_params``)::

    ?limit=20
    &filter.topic=0190...            equality
    &filter.likeCount.gte=10         range (gt, gte, lt, lte)
    &sort=createdAt:desc,title:asc   repeated or comma separated; default desc
    &page_token=<opaque>             authoritative when present
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_service.core.exceptions import InvalidFieldError, MalformedTokenError
from content_service.core.pagination.token import (
    FilterField,
    FilterOperator,
    FilterValue,
    PageToken,
    PageTokenCodec,
    SortDirection,
    SortField,
    default_codec,
)
from content_service.core.settings import get_pagination_settings

T = TypeVar("T")
U = TypeVar("U")

FILTER_PREFIX = "filter."
QueryParams = Mapping[str, str] | Iterable[tuple[str, str]]


def _default_limit() -> int:
    return get_pagination_settings().default_limit


class PaginationRequest(BaseModel):
    """Limit plus continuation state for a paginated read.

    Attributes:
        limit: Page size, clamped to PAGINATION_MAX_LIMIT.
        page_token: Filters, sorts and the last emitted id.
    """

    model_config = ConfigDict(frozen=True)

    limit: int = Field(default_factory=_default_limit, ge=1)
    page_token: PageToken = Field(default_factory=PageToken)

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return min(value, get_pagination_settings().max_limit)

    # ──────────────────────────────────────────────────────
    # Views onto the token
    # ──────────────────────────────────────────────────────

    @property
    def filters(self) -> tuple[FilterField, ...]:
        return self.page_token.filters

    @property
    def sort_fields(self) -> tuple[SortField, ...]:
        return self.page_token.sort_fields

    @property
    def page_last_resource_id(self) -> str | None:
        return self.page_token.page_last_resource_id

    # ──────────────────────────────────────────────────────
    # Builders
    # ──────────────────────────────────────────────────────

    def with_filter(
        self,
        field: str,
        value: FilterValue,
        operator: FilterOperator | str = FilterOperator.EQ,
    ) -> PaginationRequest:
        """Return a copy with one more filter appended.

        Changing the query restarts pagination, so the last id is cleared.
        """
        added = FilterField(field=field, value=value, operator=FilterOperator(operator))
        return self._with_token(filters=(*self.filters, added))

    def with_sort(
        self,
        field: str,
        direction: SortDirection | str = SortDirection.DESC,
    ) -> PaginationRequest:
        """Return a copy with one more sort key appended (applied left to right)."""
        added = SortField(field=field, direction=SortDirection(direction))
        return self._with_token(sort_fields=(*self.sort_fields, added))

    def with_limit(self, limit: int) -> PaginationRequest:
        return PaginationRequest(limit=limit, page_token=self.page_token)

    def with_scope(self, field: str, value: FilterValue) -> PaginationRequest:
        """Pin the equality filter implied by a route (e.g. ``/topics/{id}/posts``).

        A continuation token must already carry the same scope.

        Raises:
            InvalidFieldError: If a first-page request filters ``field`` to another value.
            MalformedTokenError: If the token was issued for another scope.
        """
        for flt in self.filters:
            if flt.field == field and flt.operator is FilterOperator.EQ:
                if flt.value == value:
                    return self
                if self.page_last_resource_id is None:
                    raise InvalidFieldError(
                        field,
                        detail=f"Filter '{field}' conflicts with the {field} fixed by this route",
                    )
                raise MalformedTokenError(
                    f"Page token was issued for a different {field}",
                    extra={"field": field},
                )
        if self.page_last_resource_id is not None:
            raise MalformedTokenError(
                f"Page token was issued without a {field} scope", extra={"field": field}
            )
        return self.with_filter(field, value)

    def _with_token(self, **changes: Any) -> PaginationRequest:
        token = self.page_token.model_copy(update={**changes, "page_last_resource_id": None})
        return PaginationRequest(limit=self.limit, page_token=token)

    # ──────────────────────────────────────────────────────
    # Parsing
    # ──────────────────────────────────────────────────────

    @classmethod
    def from_query_params(
        cls,
        params: QueryParams,
        *,
        default_limit: int | None = None,
        codec: PageTokenCodec | None = None,
    ) -> PaginationRequest:
        """Build a request from raw query parameters.

        Args:
            params: Mapping or (key, value) pairs; repeated keys allowed.
                Starlette ``QueryParams`` is accepted as-is.
            default_limit: Fallback when ``limit`` is missing or invalid.
            codec: Token codec; defaults to the configured secret.

        Raises:
            MalformedTokenError: If ``page_token`` does not verify.
            InvalidFieldError: On an unknown filter operator or sort direction.
        """
        pairs = _iter_pairs(params)
        fallback = default_limit or get_pagination_settings().default_limit

        limit = fallback
        token_value: str | None = None
        filters: list[FilterField] = []
        sorts: list[SortField] = []

        for key, raw in pairs:
            if key == "limit":
                limit = _parse_limit(raw, fallback)
            elif key == "page_token":
                if raw:
                    token_value = raw
            elif key.startswith(FILTER_PREFIX):
                filters.append(_parse_filter(key[len(FILTER_PREFIX):], raw))
            elif key == "sort":
                sorts.extend(_parse_sorts(raw))

        if token_value is not None:
            token = (codec or default_codec()).decode(token_value)
        else:
            token = PageToken(filters=tuple(filters), sort_fields=tuple(sorts))
        return cls(limit=limit, page_token=token)


def _iter_pairs(params: QueryParams) -> list[tuple[str, str]]:
    multi_items = getattr(params, "multi_items", None)
    if callable(multi_items):
        return list(multi_items())
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


def _parse_limit(raw: str, fallback: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value >= 1 else fallback


def _parse_filter(name: str, raw: str) -> FilterField:
    field, _, op = name.partition(".")
    if not field:
        raise InvalidFieldError(name or "filter", detail="Filter parameter is missing a field name")
    try:
        operator = FilterOperator(op) if op else FilterOperator.EQ
    except ValueError:
        raise InvalidFieldError(
            field, detail=f"Unsupported filter operator '{op}' for field '{field}'",
        ) from None
    return FilterField(field=field, value=raw, operator=operator)


def _parse_sorts(raw: str) -> list[SortField]:
    sorts = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        field, _, direction = part.partition(":")
        try:
            parsed = SortDirection(direction.lower()) if direction else SortDirection.DESC
        except ValueError:
            raise InvalidFieldError(
                field, detail=f"Unsupported sort direction '{direction}' for field '{field}'",
            ) from None
        sorts.append(SortField(field=field.strip(), direction=parsed))
    return sorts


class PaginationResponse(BaseModel, Generic[T]):
    """One page of results.

    ``next_page_token`` is present iff the page was full, i.e. more results
    may exist. Over HTTP it travels in a response header, not the body.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    items: list[T] = Field(default_factory=list)
    next_page_token: PageToken | None = None

    @property
    def next_page(self) -> str | None:
        """Encoded next page token, or None at the end of results."""
        if self.next_page_token is None:
            return None
        return self.next_page_token.encode()

    def to_headers(self, header_name: str | None = None) -> dict[str, str]:
        """Headers carrying the next page token (empty at end of results)."""
        encoded = self.next_page
        if encoded is None:
            return {}
        return {header_name or get_pagination_settings().header_name: encoded}

    def map(self, fn: Callable[[T], U]) -> PaginationResponse[U]:
        """Convert every item, keeping the token."""
        return PaginationResponse[Any](
            items=[fn(item) for item in self.items],
            next_page_token=self.next_page_token,
        )


__all__ = ["FILTER_PREFIX", "PaginationRequest", "PaginationResponse"]
