"""Repositories for topics and followers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from content_service.core.database import BaseRepository
from content_service.core.models import Follower, Post, Topic

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class TopicRepository(BaseRepository[Topic]):
    model = Topic

    async def find_by_name(self, session: AsyncSession, topic_name: str) -> Topic | None:
        return await self.find_one(session, Topic.topic_name == topic_name)

    async def post_ids(self, session: AsyncSession, topic_id: str) -> list[str]:
        """Ids of the topic's posts, captured before a cascading delete."""
        return list(await session.scalars(select(Post.id).where(Post.topic_id == topic_id)))


class FollowerRepository(BaseRepository[Follower]):
    model = Follower

    async def find(self, session: AsyncSession, topic_id: str, user_id: str) -> Follower | None:
        return await self.find_one(
            session, Follower.followable_id == topic_id, Follower.user_id == user_id
        )


__all__ = ["FollowerRepository", "TopicRepository"]
