"""Declarative read-model pipelines.

A pipeline is an ordered list of stage descriptors executed uniformly
against the store. Documents flowing between stages are plain dicts, so
each stage can be tested on its own with hand-built documents.

Stages:
    - Match: load the scoped source row (always first)
    - Lookup: equality join against another table
    - Project: reshape documents through expressions
    - AddFields: compute derived fields on the projected document

Example:
    pipeline = Pipeline([
        Match(Post, "id", post_id),
        Lookup(Like, "id", "likable_id", "likes"),
        Project({
            "id": Ref("id"),
            "liked_user_ids": Ref("likes.user_id"),
            "like_count": Size("likes"),
        }),
        AddFields({"popularity_score": WeightedSum({"like_count": 0.8})}),
    ])
    documents = await pipeline.run(session)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from content_service.infra.logging.lazy import get_lazy_logger
from content_service.utils.timestamps import format_timestamp

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.database.base import Base

type Doc = dict[str, Any]

_lazy = get_lazy_logger(__name__)


@dataclass(frozen=True, slots=True)
class PipelineContext:
    """Values shared by every stage of one run."""

    now: datetime


def resolve_path(document: Any, path: str) -> Any:
    """Resolve a dotted path, plucking through lists.

    ``resolve_path({"likes": [{"user_id": "a"}, {"user_id": "b"}]}, "likes.user_id")``
    returns ``["a", "b"]``. Missing keys resolve to ``None``.
    """
    value = document
    for segment in path.split("."):
        if isinstance(value, list):
            value = [
                item.get(segment) for item in value if isinstance(item, dict) and segment in item
            ]
        elif isinstance(value, dict):
            value = value.get(segment)
        else:
            return None
    return value


# ──────────────────────────────────────────────────────
# Expressions
# ──────────────────────────────────────────────────────


class Expression(ABC):
    """A value computed from one document."""

    @abstractmethod
    def evaluate(self, document: Doc, context: PipelineContext) -> Any: ...


@dataclass(frozen=True, slots=True)
class Ref(Expression):
    path: str

    def evaluate(self, document: Doc, context: PipelineContext) -> Any:
        return resolve_path(document, self.path)


@dataclass(frozen=True, slots=True)
class Literal(Expression):
    value: Any

    def evaluate(self, document: Doc, context: PipelineContext) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Size(Expression):
    """Length of the list at ``path``; missing or scalar values count as 0."""

    path: str

    def evaluate(self, document: Doc, context: PipelineContext) -> int:
        value = resolve_path(document, self.path)
        return len(value) if isinstance(value, list) else 0


@dataclass(frozen=True, slots=True)
class Now(Expression):
    """The run's timestamp; identical for every document of the run."""

    def evaluate(self, document: Doc, context: PipelineContext) -> datetime:
        return context.now


@dataclass(frozen=True, slots=True)
class Document(Expression):
    """Build a nested JSON document.

    Datetimes are rendered in snapshot form so the document is JSON-native.
    When ``when`` resolves to ``None`` the whole document is ``None``
    (e.g. a post whose author row is gone).
    """

    fields: Mapping[str, Expression]
    when: str | None = None

    def evaluate(self, document: Doc, context: PipelineContext) -> Doc | None:
        if self.when is not None and resolve_path(document, self.when) is None:
            return None
        return {
            name: _to_json(expr.evaluate(document, context)) for name, expr in self.fields.items()
        }


@dataclass(frozen=True, slots=True)
class WeightedSum(Expression):
    """Fixed-weight linear combination of numeric fields.

    Rounded to 6 decimals so repeated refreshes produce identical scores.
    """

    weights: Mapping[str, float]

    def evaluate(self, document: Doc, context: PipelineContext) -> float:
        total = 0.0
        for path, weight in self.weights.items():
            value = resolve_path(document, path)
            if isinstance(value, bool) or not isinstance(value, int | float):
                value = 0
            total += value * weight
        return round(total, 6)


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


# ──────────────────────────────────────────────────────
# Stages
# ──────────────────────────────────────────────────────


class Stage(ABC):
    """One step of a pipeline."""

    @abstractmethod
    async def run(
        self,
        session: AsyncSession,
        documents: list[Doc],
        context: PipelineContext,
    ) -> list[Doc]: ...


@dataclass(frozen=True, slots=True)
class Match(Stage):
    """Load the rows of ``model`` where ``field`` equals ``value``.

    Selects from the table rather than the mapped class so the documents
    reflect the store, not the session's identity map.
    """

    model: type[Base]
    field: str
    value: Any

    async def run(
        self,
        session: AsyncSession,
        documents: list[Doc],
        context: PipelineContext,
    ) -> list[Doc]:
        table = self.model.__table__
        stmt = select(table).where(table.c[self.field] == self.value)
        result = await session.execute(stmt)
        return [dict(row) for row in result.mappings()]


@dataclass(frozen=True, slots=True)
class Lookup(Stage):
    """Join rows of ``model`` whose ``foreign_field`` equals the document's ``local_field``.

    Related rows are attached as a list under ``as_field`` in ``order_by``
    order. With ``unwind`` the list is replaced by one document per related
    row; documents without a match are dropped unless ``preserve_empty``,
    in which case ``as_field`` is ``None``.
    """

    model: type[Base]
    local_field: str
    foreign_field: str
    as_field: str
    order_by: str = "id"
    unwind: bool = False
    preserve_empty: bool = False

    async def run(
        self,
        session: AsyncSession,
        documents: list[Doc],
        context: PipelineContext,
    ) -> list[Doc]:
        keys = {
            key
            for key in (resolve_path(doc, self.local_field) for doc in documents)
            if key is not None
        }
        related: defaultdict[Any, list[Doc]] = defaultdict(list)
        if keys:
            table = self.model.__table__
            stmt = (
                select(table)
                .where(table.c[self.foreign_field].in_(keys))
                .order_by(table.c[self.order_by])
            )
            result = await session.execute(stmt)
            for row in result.mappings():
                related[row[self.foreign_field]].append(dict(row))

        joined: list[Doc] = []
        for doc in documents:
            matches = related.get(resolve_path(doc, self.local_field), [])
            if not self.unwind:
                joined.append({**doc, self.as_field: matches})
            elif matches:
                joined.extend({**doc, self.as_field: match} for match in matches)
            elif self.preserve_empty:
                joined.append({**doc, self.as_field: None})
        return joined


@dataclass(frozen=True, slots=True)
class Project(Stage):
    """Replace each document with the evaluated ``fields``."""

    fields: Mapping[str, Expression]

    async def run(
        self,
        session: AsyncSession,
        documents: list[Doc],
        context: PipelineContext,
    ) -> list[Doc]:
        return [
            {name: expr.evaluate(doc, context) for name, expr in self.fields.items()}
            for doc in documents
        ]


@dataclass(frozen=True, slots=True)
class AddFields(Stage):
    """Add computed fields; later fields may reference earlier ones."""

    fields: Mapping[str, Expression]

    async def run(
        self,
        session: AsyncSession,
        documents: list[Doc],
        context: PipelineContext,
    ) -> list[Doc]:
        updated = []
        for doc in documents:
            current = dict(doc)
            for name, expr in self.fields.items():
                current[name] = expr.evaluate(current, context)
            updated.append(current)
        return updated


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Ordered stages scoped by a leading ``Match``."""

    stages: Sequence[Stage]

    def __post_init__(self) -> None:
        if not self.stages or not isinstance(self.stages[0], Match):
            msg = "A pipeline must start with a Match stage"
            raise ValueError(msg)

    async def run(self, session: AsyncSession, *, now: datetime | None = None) -> list[Doc]:
        """Execute every stage in order; stops early once no documents remain."""
        context = PipelineContext(now=now or datetime.now(UTC))
        documents: list[Doc] = []
        for stage in self.stages:
            documents = await stage.run(session, documents, context)
            _lazy.debug(lambda s=stage, n=len(documents): f"{type(s).__name__} -> {n} document(s)")
            if not documents:
                break
        return documents


__all__ = [
    "AddFields",
    "Doc",
    "Document",
    "Expression",
    "Literal",
    "Lookup",
    "Match",
    "Now",
    "Pipeline",
    "PipelineContext",
    "Project",
    "Ref",
    "Size",
    "Stage",
    "WeightedSum",
    "resolve_path",
]
