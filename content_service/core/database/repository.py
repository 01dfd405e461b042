"""Generic repository for the source tables.

Aggregate tables are never written through a repository; views own them.

Example:
    class TopicRepository(BaseRepository[Topic]):
        model = Topic

        async def find_by_name(self, session: AsyncSession, name: str) -> Topic | None:
            return await self.find_one(session, Topic.topic_name == name)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import select

from content_service.core.database.exceptions import NotFoundError
from content_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_lazy_logger(__name__)


class BaseRepository[T]:
    """Lookups and writes on ``model`` within the caller's session.

    Writes flush but never commit; the request's unit of work does.
    """

    model: ClassVar[type[Any]]

    async def get(self, session: AsyncSession, id: Any) -> T | None:
        return await session.get(self.model, id)

    async def get_or_raise(self, session: AsyncSession, id: Any) -> T:
        """Raises NotFoundError, rendered as ``<model>-not-found``."""
        instance = await self.get(session, id)
        if instance is None:
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def find_one(self, session: AsyncSession, *conditions: ColumnElement[bool]) -> T | None:
        return (await session.execute(select(self.model).where(*conditions))).scalar_one_or_none()

    async def create(self, session: AsyncSession, instance: T) -> T:
        session.add(instance)
        await session.flush()
        logger.debug(lambda: f"Created {self.model.__name__} {getattr(instance, 'id', None)}")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        await session.delete(instance)
        await session.flush()
        logger.debug(lambda: f"Deleted {self.model.__name__} {getattr(instance, 'id', None)}")


__all__ = ["BaseRepository"]
