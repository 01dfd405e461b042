"""Full-text search over a materialized aggregate view.

Search runs in two steps:

1. The store narrows the view to candidates: the request's filters (with
   the same validation as ``find_all``) and a case-insensitive containment
   match of each term's prefix on any search field. Whole-word matches,
   then popularity, decide which candidates survive the ``max_candidates`` cap.
2. Candidates are ranked in process by fuzzy relevance multiplied by the
   popularity boost, then sliced after the page token's boundary.

Ranking is similarity driven, so continuation is positional: the next page
starts right after the boundary document in the re-ranked list.
"""

from __future__ import annotations

import operator
import time
from dataclasses import dataclass
from functools import cmp_to_key, reduce
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel
from sqlalchemy import String, case, cast, literal, select

from content_service.core.database.filters import (
    FilterGroup,
    Limit,
    OrderBy,
    SearchFilter,
    WhereFilter,
    lower_text,
)
from content_service.core.database.store import store_operation
from content_service.core.exceptions import InvalidFieldError, MalformedTokenError
from content_service.core.pagination.fields import FieldType
from content_service.core.pagination.request import PaginationRequest, PaginationResponse
from content_service.core.search.fuzzy import relevance, tokenize
from content_service.core.settings import get_search_settings
from content_service.core.views.pipeline import resolve_path
from content_service.infra.logging.lazy import get_lazy_logger
from content_service.infra.metrics.tracking import track_page_token_rejected, track_paginated_query

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.settings.search import SearchSettings
    from content_service.core.views.base import AggregateView

_lazy = get_lazy_logger(__name__)

_SORT_DEFAULTS: dict[FieldType, Any] = {
    FieldType.INTEGER: 0,
    FieldType.NUMBER: 0.0,
    FieldType.BOOLEAN: False,
    FieldType.STRING: "",
    FieldType.DATETIME: "",
}


@dataclass(frozen=True, slots=True)
class SearchField:
    """A text-bearing store path; ``multi`` marks a JSON list of strings."""

    path: str
    multi: bool = False


@dataclass(frozen=True, slots=True)
class ScoredHit:
    id: str
    score: float
    row: Any


class SearchIndex[ReadT: BaseModel]:
    """Fuzzy, popularity-boosted search over one aggregate view.

    Subclasses set ``search_fields`` and optionally ``score_field``.

    Example:
        index = PostSearchIndex(post_view)
        page = await index.search(session, "pythn tips", PaginationRequest(limit=10))
    """

    search_fields: ClassVar[tuple[SearchField, ...]]
    score_field: ClassVar[str | None] = "popularity_score"

    def __init__(self, view: AggregateView[ReadT], settings: SearchSettings | None = None) -> None:
        self.view = view
        self.settings = settings or get_search_settings()
        self.name = view.name
        columns = view.aggregate_model.__table__.columns
        for search_field in self.search_fields:
            head = search_field.path.split(".")[0]
            if head not in columns:
                msg = f"{type(self).__name__}: unknown search column '{head}'"
                raise ValueError(msg)

    # ──────────────────────────────────────────────────────
    # Query text
    # ──────────────────────────────────────────────────────

    def terms(self, text: str) -> list[str]:
        """Distinct query terms in order of appearance.

        Raises:
            InvalidFieldError: If ``text`` holds no searchable word.
        """
        if not text or not text.strip():
            raise InvalidFieldError("q", detail="Search text must not be blank")
        terms = list(dict.fromkeys(tokenize(text[: self.settings.max_query_length])))
        if not terms:
            raise InvalidFieldError("q", detail="Search text contains no searchable words")
        return terms

    # ──────────────────────────────────────────────────────
    # Candidates
    # ──────────────────────────────────────────────────────

    def _text_expression(self, search_field: SearchField) -> ColumnElement[Any]:
        head, *rest = search_field.path.split(".")
        column = getattr(self.view.aggregate_model, head)
        if not rest:
            return column
        element = column[rest[0]] if len(rest) == 1 else column[tuple(rest)]
        if search_field.multi:
            return cast(element, String)
        return element.as_string()

    def candidate_rank(self, terms: list[str]) -> ColumnElement[Any]:
        """Store-side pre-rank applied before the candidate cap.

        Per field and term: 2 for a whole-word (or whole list item) match,
        plus 1 for containing the full term. Prefix-only matches score 0.
        """
        parts: list[ColumnElement[Any]] = []
        for search_field in self.search_fields:
            text = lower_text(self._text_expression(search_field))
            for term in terms:
                if search_field.multi:
                    whole = text.contains(f'"{term}"', autoescape=True)
                else:
                    padded = literal(" ", String) + text + literal(" ", String)
                    whole = padded.contains(f" {term} ", autoescape=True)
                parts.append(case((whole, 2), else_=0))
                parts.append(case((text.contains(term, autoescape=True), 1), else_=0))
        return reduce(operator.add, parts)

    def candidate_statement(self, terms: list[str], request: PaginationRequest) -> Any:
        """Filtered prefix matches, best pre-ranked first, capped at ``max_candidates``."""
        model = self.view.aggregate_model
        builder = self.view.query_builder
        prefixes = [
            prefix
            for prefix in dict.fromkeys(
                term[: self.settings.fuzzy_prefix_length] or term for term in terms
            )
            if prefix
        ]
        filters = [WhereFilter(builder.filter_conditions(request))]
        if self.settings.fuzzy_prefix_length > 0:
            filters.append(
                SearchFilter([self._text_expression(f) for f in self.search_fields], prefixes)
            )
        order = [self.candidate_rank(terms)]
        if self.score_field:
            order.append(getattr(model, self.score_field))
        order.append(builder.fields.id_expression)
        filters.append(OrderBy(order, "desc"))
        filters.append(Limit(self.settings.max_candidates))
        stmt = select(model).execution_options(populate_existing=True)
        return FilterGroup(filters).apply(stmt)

    # ──────────────────────────────────────────────────────
    # Ranking
    # ──────────────────────────────────────────────────────

    def document_tokens(self, row: Any) -> list[str]:
        tokens: list[str] = []
        for search_field in self.search_fields:
            head, *rest = search_field.path.split(".")
            value = getattr(row, head)
            if rest:
                value = resolve_path(value, ".".join(rest))
            if isinstance(value, str):
                tokens.extend(tokenize(value))
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, str):
                        tokens.extend(tokenize(item))
        return tokens

    def score(self, row: Any, terms: list[str], boost: float) -> float:
        """Relevance multiplied by ``1 + boost * popularity``; 0 when nothing matches."""
        matched = relevance(
            terms,
            self.document_tokens(row),
            max_edits=self.settings.fuzzy_max_edits,
            prefix_length=self.settings.fuzzy_prefix_length,
        )
        if matched <= 0:
            return 0.0
        popularity = getattr(row, self.score_field, 0.0) if self.score_field else 0.0
        return matched * (1.0 + boost * float(popularity or 0.0))

    def rank(self, hits: list[ScoredHit], request: PaginationRequest) -> list[ScoredHit]:
        """Order hits by the request's sorts, or by score descending; id breaks ties.

        Sorts apply left to right; an explicit id sort ends the key list.
        """
        fields = self.view.fields
        sorts = []
        id_descending = None
        for sort in request.sort_fields:
            if sort.field == fields.id_alias:
                id_descending = sort.direction.is_descending
                break
            sorts.append(sort)
        if id_descending is None:
            id_descending = sorts[0].direction.is_descending if sorts else True

        def sort_key(hit: ScoredHit) -> list[tuple[Any, bool]]:
            if not request.sort_fields:
                return [(hit.score, True), (hit.id, id_descending)]
            values = []
            for sort in sorts:
                mapping = fields.resolve(sort.field)
                head, *rest = mapping.segments
                value = getattr(hit.row, head)
                if rest:
                    value = resolve_path(value, ".".join(rest))
                if value is None:
                    value = _SORT_DEFAULTS[mapping.type]
                values.append((value, sort.direction.is_descending))
            values.append((hit.id, id_descending))
            return values

        keys = {hit.id: sort_key(hit) for hit in hits}

        def compare(left: ScoredHit, right: ScoredHit) -> int:
            for (a, descending), (b, _) in zip(keys[left.id], keys[right.id], strict=True):
                if a == b:
                    continue
                result = -1 if a < b else 1
                return -result if descending else result
            return 0

        return sorted(hits, key=cmp_to_key(compare))

    # ──────────────────────────────────────────────────────
    # Search
    # ──────────────────────────────────────────────────────

    async def search(
        self,
        session: AsyncSession,
        text: str,
        request: PaginationRequest,
        boost: float | None = None,
    ) -> PaginationResponse[ReadT]:
        """One page of fuzzy search results.

        Raises:
            InvalidFieldError: On blank text, negative boost, or bad request fields.
            MalformedTokenError: If the boundary document is no longer a match.
            StoreUnavailableError: On timeout or connection failure.
        """
        terms = self.terms(text)
        boost = self.settings.default_boost if boost is None else boost
        if boost < 0:
            raise InvalidFieldError("boost", detail="Boost must not be negative")
        self.view.query_builder.validate(request)

        started = time.perf_counter()
        stmt = self.candidate_statement(terms, request)
        async with store_operation(f"{self.name}.search"):
            rows = list((await session.scalars(stmt)).all())

        hits = []
        for row in rows:
            score = self.score(row, terms, boost)
            if score > 0:
                hits.append(ScoredHit(id=str(row.id), score=score, row=row))
        ranked = self.rank(hits, request)
        _lazy.debug(
            lambda: f"{self.name} search {terms!r}: {len(rows)} candidates, {len(ranked)} hits"
        )

        start = 0
        last_id = request.page_last_resource_id
        if last_id is not None:
            position = next((i for i, hit in enumerate(ranked) if hit.id == last_id), None)
            if position is None:
                track_page_token_rejected("boundary_missing")
                raise MalformedTokenError(
                    "Page token refers to a result that no longer matches; restart the search",
                    extra={"page_last_resource_id": last_id},
                )
            start = position + 1

        page = ranked[start : start + request.limit]
        next_token = None
        if page and len(page) == request.limit:
            next_token = request.page_token.next_page_token(page[-1].id)

        track_paginated_query(self.name, "search", time.perf_counter() - started, len(page))
        return PaginationResponse(
            items=[self.view.read_schema.model_validate(hit.row) for hit in page],
            next_page_token=next_token,
        )


__all__ = ["ScoredHit", "SearchField", "SearchIndex"]
