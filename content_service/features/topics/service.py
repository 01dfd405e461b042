"""Write-side topic operations.

Every mutation refreshes the topic aggregate before returning, so the
read model reflects the write by the time the request completes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from content_service.core.database import NotFoundError
from content_service.core.exceptions import ConflictException, ForbiddenException
from content_service.core.models import Follower, Topic
from content_service.core.services import BaseService
from content_service.features.posts.views import PostAggregateView, get_post_view
from content_service.features.topics.repository import FollowerRepository, TopicRepository
from content_service.features.topics.views import TopicAggregateView, get_topic_view

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from content_service.core.models import User
    from content_service.features.topics.schemas import (
        TopicAggregateRead,
        TopicCreate,
        TopicUpdate,
    )


class TopicService(BaseService):
    """Writes to topics and their followers."""

    def __init__(
        self,
        session: AsyncSession,
        view: TopicAggregateView | None = None,
        topics: TopicRepository | None = None,
        followers: FollowerRepository | None = None,
        post_view: PostAggregateView | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._view = view or get_topic_view()
        self._topics = topics or TopicRepository()
        self._followers = followers or FollowerRepository()
        self._post_view = post_view or get_post_view()

    async def _refresh(self, topic_id: str) -> TopicAggregateRead:
        aggregate = await self._view.refresh_view(self._session, topic_id)
        if aggregate is None:
            raise NotFoundError("Topic", {"id": topic_id})
        return aggregate

    async def create_topic(self, owner: User, payload: TopicCreate) -> TopicAggregateRead:
        """Create a topic owned by ``owner``.

        Raises:
            ConflictException: If the topic name is taken.
        """
        if await self._topics.find_by_name(self._session, payload.topic_name) is not None:
            raise ConflictException(
                f"Topic '{payload.topic_name}' already exists",
                type="topic-conflict",
                extra={"field": "topic_name", "value": payload.topic_name},
            )
        topic = await self._topics.create(
            self._session,
            Topic(
                topic_name=payload.topic_name,
                description=payload.description,
                tags=payload.tags,
                owner_id=owner.id,
            ),
        )
        self.logger.info(
            "Topic created",
            extra={"topic_id": topic.id, "owner_id": owner.id, "operation": "service.create_topic"},
        )
        return await self._refresh(topic.id)

    async def update_topic(
        self, user: User, topic_id: str, payload: TopicUpdate
    ) -> TopicAggregateRead:
        """Edit a topic (owner only) and refresh what denormalizes it.

        A rename also refreshes the topic's post aggregates, whose snapshots
        embed the topic name. ``description`` may be cleared with ``null``.

        Raises:
            NotFoundError: If the topic does not exist.
            ForbiddenException: If ``user`` does not own the topic.
            ConflictException: If the new name belongs to another topic.
        """
        topic = await self._topics.get_or_raise(self._session, topic_id)
        if topic.owner_id != user.id:
            raise ForbiddenException(
                "Only the topic owner may edit it", extra={"topic_id": topic_id}
            )

        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        renamed = "topic_name" in changes and changes["topic_name"] != topic.topic_name
        if renamed:
            existing = await self._topics.find_by_name(self._session, changes["topic_name"])
            if existing is not None and existing.id != topic_id:
                raise ConflictException(
                    f"Topic '{changes['topic_name']}' already exists",
                    type="topic-conflict",
                    extra={"field": "topic_name", "value": changes["topic_name"]},
                )
        for field, value in changes.items():
            setattr(topic, field, value)

        aggregate = await self._refresh(topic_id)
        if renamed:
            for post_id in await self._topics.post_ids(self._session, topic_id):
                await self._post_view.refresh_view(self._session, post_id)
        self.logger.info(
            "Topic updated",
            extra={
                "topic_id": topic_id,
                "fields": sorted(changes),
                "operation": "service.update_topic",
            },
        )
        return aggregate

    async def delete_topic(self, user: User, topic_id: str) -> None:
        """Delete a topic (owner only) with its posts and their aggregates.

        Raises:
            NotFoundError: If the topic does not exist.
            ForbiddenException: If ``user`` does not own the topic.
        """
        topic = await self._topics.get_or_raise(self._session, topic_id)
        if topic.owner_id != user.id:
            raise ForbiddenException(
                "Only the topic owner may delete it", extra={"topic_id": topic_id}
            )
        post_ids = await self._topics.post_ids(self._session, topic_id)
        await self._topics.delete(self._session, topic)
        for post_id in post_ids:
            await self._post_view.remove_view(self._session, post_id)
        await self._view.remove_view(self._session, topic_id)
        self.logger.info(
            "Topic deleted",
            extra={
                "topic_id": topic_id,
                "posts": len(post_ids),
                "operation": "service.delete_topic",
            },
        )

    async def follow(self, user: User, topic_id: str) -> TopicAggregateRead:
        """Follow a topic; following twice is a no-op."""
        await self._topics.get_or_raise(self._session, topic_id)
        if await self._followers.find(self._session, topic_id, user.id) is None:
            await self._followers.create(
                self._session, Follower(followable_id=topic_id, user_id=user.id)
            )
        self._lazy.debug(lambda: f"service.follow({topic_id}, {user.id})")
        return await self._refresh(topic_id)

    async def unfollow(self, user: User, topic_id: str) -> TopicAggregateRead:
        """Stop following a topic; unfollowing when not following is a no-op."""
        await self._topics.get_or_raise(self._session, topic_id)
        follower = await self._followers.find(self._session, topic_id, user.id)
        if follower is not None:
            await self._followers.delete(self._session, follower)
        self._lazy.debug(lambda: f"service.unfollow({topic_id}, {user.id})")
        return await self._refresh(topic_id)


__all__ = ["TopicService"]
