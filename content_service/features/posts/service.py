"""Write-side post operations.

Each mutation refreshes the affected aggregates synchronously: the post
aggregate always, the topic aggregate when the topic's post count changes.
Refreshes run in the caller's transaction, so a failed refresh rolls back
with the write that triggered it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from content_service.core.database import NotFoundError
from content_service.core.exceptions import ForbiddenException
from content_service.core.models import Comment, Like, Post, Viewer
from content_service.core.services import BaseService
from content_service.features.posts.repository import (
    CommentRepository,
    LikeRepository,
    PostRepository,
    ViewerRepository,
)
from content_service.features.posts.schemas import PostUserActivity
from content_service.features.posts.views import PostAggregateView, get_post_view
from content_service.features.topics.repository import TopicRepository
from content_service.features.topics.views import TopicAggregateView, get_topic_view

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.models import User
    from content_service.features.posts.schemas import (
        CommentCreate,
        PostAggregateRead,
        PostCreate,
        PostUpdate,
    )


class PostService(BaseService):
    """Creates posts and records engagement on them."""

    def __init__(
        self,
        session: AsyncSession,
        post_view: PostAggregateView | None = None,
        topic_view: TopicAggregateView | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._post_view = post_view or get_post_view()
        self._topic_view = topic_view or get_topic_view()
        self._posts = PostRepository()
        self._topics = TopicRepository()
        self._comments = CommentRepository()
        self._likes = LikeRepository()
        self._viewers = ViewerRepository()

    async def _refresh(self, post_id: str) -> PostAggregateRead:
        aggregate = await self._post_view.refresh_view(self._session, post_id)
        if aggregate is None:
            raise NotFoundError("Post", {"id": post_id})
        return aggregate

    async def create_post(
        self, author: User, topic_id: str, payload: PostCreate
    ) -> PostAggregateRead:
        """Publish a post in ``topic_id``.

        Raises:
            NotFoundError: If the topic does not exist.
        """
        await self._topics.get_or_raise(self._session, topic_id)
        post = await self._posts.create(
            self._session,
            Post(
                title=payload.title,
                content=payload.content,
                topic_id=topic_id,
                author_id=author.id,
            ),
        )
        self.logger.info(
            "Post created",
            extra={"post_id": post.id, "topic_id": topic_id, "operation": "service.create_post"},
        )
        aggregate = await self._refresh(post.id)
        await self._topic_view.refresh_view(self._session, topic_id)
        return aggregate

    async def update_post(self, user: User, post_id: str, payload: PostUpdate) -> PostAggregateRead:
        """Edit a post's title or content (author only).

        Raises:
            NotFoundError: If the post does not exist.
            ForbiddenException: If ``user`` is not the author.
        """
        post = await self._get_owned(user, post_id)
        changes = payload.model_dump(exclude_none=True)
        for field, value in changes.items():
            setattr(post, field, value)
        self._lazy.debug(lambda: f"service.update_post({post_id}) fields={sorted(changes)}")
        return await self._refresh(post_id)

    async def delete_post(self, user: User, post_id: str) -> None:
        """Delete a post (author only) and remove its aggregate."""
        post = await self._get_owned(user, post_id)
        topic_id = post.topic_id
        await self._posts.delete(self._session, post)
        await self._post_view.remove_view(self._session, post_id)
        await self._topic_view.refresh_view(self._session, topic_id)
        self.logger.info(
            "Post deleted", extra={"post_id": post_id, "operation": "service.delete_post"}
        )

    async def like(self, user: User, post_id: str) -> PostAggregateRead:
        """Like a post; liking twice is a no-op."""
        await self._posts.get_or_raise(self._session, post_id)
        if await self._likes.find(self._session, post_id, user.id) is None:
            await self._likes.create(self._session, Like(likable_id=post_id, user_id=user.id))
        return await self._refresh(post_id)

    async def unlike(self, user: User, post_id: str) -> PostAggregateRead:
        """Remove a like; a no-op when the user has not liked the post."""
        await self._posts.get_or_raise(self._session, post_id)
        like = await self._likes.find(self._session, post_id, user.id)
        if like is not None:
            await self._likes.delete(self._session, like)
        return await self._refresh(post_id)

    async def view(self, user: User, post_id: str) -> PostAggregateRead:
        """Record that ``user`` viewed the post; each user counts once."""
        await self._posts.get_or_raise(self._session, post_id)
        if await self._viewers.find(self._session, post_id, user.id) is None:
            await self._viewers.create(self._session, Viewer(viewable_id=post_id, user_id=user.id))
            return await self._refresh(post_id)
        aggregate = await self._post_view.find(self._session, post_id)
        return aggregate if aggregate is not None else await self._refresh(post_id)

    async def add_comment(self, user: User, post_id: str, payload: CommentCreate) -> Comment:
        await self._posts.get_or_raise(self._session, post_id)
        comment = await self._comments.create(
            self._session, Comment(post_id=post_id, author_id=user.id, content=payload.content)
        )
        await self._refresh(post_id)
        return comment

    async def with_activity(
        self, user: User | None, aggregates: list[PostAggregateRead]
    ) -> list[PostAggregateRead]:
        """Attach ``user``'s like and view state to each aggregate.

        ``liked``/``viewed`` follow the aggregate's id lists; the timestamps
        come from the engagement rows. Anonymous reads are returned as is.
        """
        if user is None or not aggregates:
            return aggregates
        post_ids = [aggregate.id for aggregate in aggregates]
        liked_at = await self._likes.liked_at(self._session, user.id, post_ids)
        viewed_at = await self._viewers.viewed_at(self._session, user.id, post_ids)
        return [
            aggregate.model_copy(
                update={
                    "user_activity": PostUserActivity(
                        liked=user.id in aggregate.liked_user_ids,
                        liked_at=liked_at.get(aggregate.id),
                        viewed=user.id in aggregate.viewer_ids,
                        viewed_at=viewed_at.get(aggregate.id),
                    )
                }
            )
            for aggregate in aggregates
        ]

    async def activity_for(
        self, user: User | None, aggregate: PostAggregateRead
    ) -> PostAggregateRead:
        (result,) = await self.with_activity(user, [aggregate])
        return result

    async def _get_owned(self, user: User, post_id: str) -> Post:
        post = await self._posts.get_or_raise(self._session, post_id)
        if post.author_id != user.id:
            raise ForbiddenException(
                "Only the author may modify this post", extra={"post_id": post_id}
            )
        return post


__all__ = ["PostService"]
