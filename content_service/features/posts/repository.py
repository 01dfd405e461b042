"""Repositories for posts and their engagement rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from content_service.core.database import BaseRepository
from content_service.core.models import Comment, Like, Post, Viewer

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession


class PostRepository(BaseRepository[Post]):
    model = Post


class CommentRepository(BaseRepository[Comment]):
    model = Comment


class LikeRepository(BaseRepository[Like]):
    model = Like

    async def find(self, session: AsyncSession, post_id: str, user_id: str) -> Like | None:
        return await self.find_one(session, Like.likable_id == post_id, Like.user_id == user_id)

    async def liked_at(
        self, session: AsyncSession, user_id: str, post_ids: Sequence[str]
    ) -> dict[str, datetime]:
        """When ``user_id`` liked each of ``post_ids``; posts not liked are absent."""
        if not post_ids:
            return {}
        rows = await session.execute(
            select(Like.likable_id, Like.created_at).where(
                Like.user_id == user_id, Like.likable_id.in_(post_ids)
            )
        )
        return {post_id: created_at for post_id, created_at in rows}


class ViewerRepository(BaseRepository[Viewer]):
    model = Viewer

    async def find(self, session: AsyncSession, post_id: str, user_id: str) -> Viewer | None:
        return await self.find_one(
            session, Viewer.viewable_id == post_id, Viewer.user_id == user_id
        )

    async def viewed_at(
        self, session: AsyncSession, user_id: str, post_ids: Sequence[str]
    ) -> dict[str, datetime]:
        if not post_ids:
            return {}
        rows = await session.execute(
            select(Viewer.viewable_id, Viewer.created_at).where(
                Viewer.user_id == user_id, Viewer.viewable_id.in_(post_ids)
            )
        )
        return {post_id: created_at for post_id, created_at in rows}


__all__ = ["CommentRepository", "LikeRepository", "PostRepository", "ViewerRepository"]
