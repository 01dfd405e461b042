"""Aggregate view capability.

A concrete view declares which table it materializes, the source table it
mirrors, its public field aliases and the pipeline that computes one
document. The base class owns refresh, removal and read access; the
query builder only ever sees the view's ``FieldMappingTable``.

Example:
    class PostAggregateView(AggregateView[PostAggregateRead]):
        name = "post_aggregates"
        aggregate_model = PostAggregate
        source_model = Post
        read_schema = PostAggregateRead
        fields = POST_FIELDS

        def build_pipeline(self, id: str) -> Pipeline:
            return Pipeline([Match(Post, "id", id), ...])

    view = PostAggregateView()
    aggregate = await view.refresh_view(session, post_id)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel
from sqlalchemy import delete, select

from content_service.core.database.store import store_operation, upsert_statement
from content_service.core.pagination.query_builder import PaginationQueryBuilder
from content_service.infra.metrics.tracking import track_view_refresh

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.database.base import Base
    from content_service.core.pagination.fields import FieldMappingTable
    from content_service.core.pagination.request import PaginationRequest, PaginationResponse
    from content_service.core.views.pipeline import Doc, Pipeline

logger = logging.getLogger(__name__)


class AggregateView[ReadT: BaseModel](ABC):
    """Materialized read model over one source entity.

    Subclasses set:
        name: Collection name used in logs and metrics
        aggregate_model: Table holding the materialized documents
        source_model: Table the documents mirror (1:1 by id)
        read_schema: Pydantic model returned by reads
        fields: Public alias table for filtering and sorting
    """

    name: ClassVar[str]
    aggregate_model: ClassVar[type[Base]]
    source_model: ClassVar[type[Base]]
    read_schema: type[ReadT]
    fields: ClassVar[FieldMappingTable]

    def __init__(self) -> None:
        if self.fields.model is not self.aggregate_model:
            msg = f"{type(self).__name__}: field table targets {self.fields.model.__name__}"
            raise ValueError(msg)
        self.query_builder: PaginationQueryBuilder[Any] = PaginationQueryBuilder(
            self.fields, name=self.name
        )

    @abstractmethod
    def build_pipeline(self, id: str) -> Pipeline:
        """Pipeline computing the aggregate document for source ``id``."""

    async def refresh_view(self, session: AsyncSession, id: str) -> ReadT | None:
        """Recompute and upsert the aggregate for ``id``.

        If the source no longer exists the stale aggregate is deleted and
        ``None`` is returned. Runs inside the caller's transaction: on
        failure nothing is upserted once the caller rolls back.

        Raises:
            StoreUnavailableError: On timeout or connection failure.
        """
        started = time.perf_counter()
        outcome = "failed"
        try:
            async with store_operation(f"{self.name}.refresh"):
                # Pending writes of the triggering mutation must be visible
                await session.flush()
                documents = await self.build_pipeline(id).run(session)
                if not documents:
                    await self._delete(session, id)
                    outcome = "removed"
                    logger.info(
                        "Source missing, aggregate removed",
                        extra={"view": self.name, "id": id},
                    )
                    return None

                if len(documents) > 1:
                    logger.warning(
                        "Pipeline produced more than one document; keeping the first",
                        extra={"view": self.name, "id": id, "count": len(documents)},
                    )
                values = self._row_values(documents[0])
                await session.execute(upsert_statement(session, self.aggregate_model, values))
            outcome = "upserted"
        finally:
            track_view_refresh(self.name, outcome, time.perf_counter() - started)

        logger.debug("Aggregate refreshed", extra={"view": self.name, "id": id})
        return self.read_schema.model_validate(values)

    async def remove_view(self, session: AsyncSession, id: str) -> bool:
        """Delete the aggregate for ``id``. Returns whether one existed."""
        async with store_operation(f"{self.name}.remove"):
            removed = await self._delete(session, id)
        logger.info("Aggregate removed", extra={"view": self.name, "id": id, "existed": removed})
        return removed

    async def find(self, session: AsyncSession, id: str) -> ReadT | None:
        """Current materialized aggregate, or ``None`` if never refreshed."""
        model = self.aggregate_model
        stmt = (
            select(model)
            .where(model.__table__.c.id == id)
            .execution_options(populate_existing=True)
        )
        async with store_operation(f"{self.name}.find"):
            row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return self.read_schema.model_validate(row)

    async def find_all(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        *,
        scope: Sequence[ColumnElement[bool]] = (),
    ) -> PaginationResponse[ReadT]:
        """One page of aggregates for ``request``, optionally narrowed by ``scope``.

        Raises:
            InvalidFieldError: On unmapped fields or mistyped filter values.
            MalformedTokenError: If the continuation boundary is gone.
            StoreUnavailableError: On timeout or connection failure.
        """
        page = await self.query_builder.execute(session, request, scope=scope)
        return page.map(self.read_schema.model_validate)

    def _row_values(self, document: Doc) -> dict[str, Any]:
        columns = [column.name for column in self.aggregate_model.__table__.columns]
        missing = [name for name in columns if name not in document]
        if missing:
            msg = f"{self.name} pipeline did not produce: {', '.join(missing)}"
            raise ValueError(msg)
        return {name: document[name] for name in columns}

    async def _delete(self, session: AsyncSession, id: str) -> bool:
        table = self.aggregate_model.__table__
        result = await session.execute(delete(table).where(table.c.id == id))
        return bool(result.rowcount)


__all__ = ["AggregateView"]
