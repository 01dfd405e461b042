"""Tests for the write-side post and topic services."""

from __future__ import annotations

import pytest

from content_service.core.database import NotFoundError
from content_service.core.exceptions import ConflictException, ForbiddenException
from content_service.features.posts.schemas import CommentCreate, PostCreate, PostUpdate
from content_service.features.posts.service import PostService
from content_service.features.posts.views import PostAggregateView
from content_service.features.topics.schemas import TopicCreate
from content_service.features.topics.service import TopicService
from content_service.features.topics.views import TopicAggregateView


@pytest.fixture
def post_view() -> PostAggregateView:
    return PostAggregateView()


@pytest.fixture
def topic_view() -> TopicAggregateView:
    return TopicAggregateView()


@pytest.fixture
def post_service(db_session, post_view, topic_view) -> PostService:
    return PostService(db_session, post_view=post_view, topic_view=topic_view)


@pytest.fixture
def topic_service(db_session, post_view, topic_view) -> TopicService:
    return TopicService(db_session, view=topic_view, post_view=post_view)


class TestTopicService:
    async def test_create_topic(self, topic_service, make_user):
        owner = await make_user("owner")

        aggregate = await topic_service.create_topic(
            owner, TopicCreate(topic_name="python", tags=["Web", " web ", "asyncio"])
        )

        assert aggregate.topic.topic_name == "python"
        assert aggregate.topic.tags == ["web", "asyncio"]
        assert aggregate.topic.owner is not None
        assert aggregate.topic.owner.id == owner.id
        assert aggregate.follower_count == 0
        assert aggregate.post_count == 0

    async def test_duplicate_name_conflicts(self, topic_service, make_user):
        owner = await make_user()
        await topic_service.create_topic(owner, TopicCreate(topic_name="python"))

        with pytest.raises(ConflictException) as exc_info:
            await topic_service.create_topic(owner, TopicCreate(topic_name="python"))

        assert exc_info.value.status_code == 409

    async def test_follow_is_idempotent(self, topic_service, make_user, make_topic):
        reader = await make_user()
        topic = await make_topic(None)

        await topic_service.follow(reader, topic.id)
        aggregate = await topic_service.follow(reader, topic.id)

        assert aggregate.follower_count == 1
        assert aggregate.follower_ids == [reader.id]
        assert aggregate.popularity_score == pytest.approx(0.7)

    async def test_unfollow(self, topic_service, make_user, make_topic):
        reader = await make_user()
        topic = await make_topic(None)
        await topic_service.follow(reader, topic.id)

        aggregate = await topic_service.unfollow(reader, topic.id)
        again = await topic_service.unfollow(reader, topic.id)

        assert aggregate.follower_count == 0
        assert again.follower_ids == []

    async def test_follow_unknown_topic(self, topic_service, make_user):
        reader = await make_user()

        with pytest.raises(NotFoundError):
            await topic_service.follow(reader, "missing")

    async def test_only_owner_deletes(self, db_session, topic_service, make_user, topic_view):
        owner = await make_user()
        stranger = await make_user()
        created = await topic_service.create_topic(owner, TopicCreate(topic_name="python"))

        with pytest.raises(ForbiddenException):
            await topic_service.delete_topic(stranger, created.id)

        assert await topic_view.find(db_session, created.id) is not None

    async def test_delete_removes_topic_and_post_aggregates(
        self, db_session, topic_service, post_service, post_view, topic_view, make_user
    ):
        owner = await make_user()
        topic = await topic_service.create_topic(owner, TopicCreate(topic_name="python"))
        post = await post_service.create_post(owner, topic.id, PostCreate(title="t", content="c"))

        await topic_service.delete_topic(owner, topic.id)

        assert await topic_view.find(db_session, topic.id) is None
        assert await post_view.find(db_session, post.id) is None


class TestPostService:
    @pytest.fixture
    async def setting(self, make_user, make_topic):
        author = await make_user("author")
        reader = await make_user("reader")
        topic = await make_topic(author)
        return author, reader, topic

    async def test_create_post_refreshes_both_views(
        self, db_session, post_service, topic_view, setting
    ):
        author, _, topic = setting

        aggregate = await post_service.create_post(
            author, topic.id, PostCreate(title="Hello", content="World")
        )
        topic_aggregate = await topic_view.find(db_session, topic.id)

        assert aggregate.post.title == "Hello"
        assert aggregate.post.author is not None
        assert aggregate.post.author.username == "author"
        assert aggregate.post.topic is not None
        assert aggregate.post.topic.id == topic.id
        assert aggregate.like_count == 0
        assert topic_aggregate is not None
        assert topic_aggregate.post_count == 1

    async def test_create_post_in_unknown_topic(self, post_service, setting):
        author, _, _ = setting

        with pytest.raises(NotFoundError):
            await post_service.create_post(author, "missing", PostCreate(title="a", content="b"))

    async def test_like_unlike(self, post_service, setting):
        author, reader, topic = setting
        post = await post_service.create_post(author, topic.id, PostCreate(title="a", content="b"))

        await post_service.like(reader, post.id)
        liked = await post_service.like(reader, post.id)
        unliked = await post_service.unlike(reader, post.id)
        again = await post_service.unlike(reader, post.id)

        assert liked.like_count == 1
        assert liked.liked_user_ids == [reader.id]
        assert liked.popularity_score == pytest.approx(0.8)
        assert unliked.like_count == 0
        assert again.like_count == 0

    async def test_views_count_each_user_once(self, post_service, setting):
        author, reader, topic = setting
        post = await post_service.create_post(author, topic.id, PostCreate(title="a", content="b"))

        await post_service.view(reader, post.id)
        await post_service.view(reader, post.id)
        aggregate = await post_service.view(author, post.id)

        assert aggregate.view_count == 2
        assert aggregate.viewer_ids == [reader.id, author.id]

    async def test_add_comment(self, db_session, post_service, post_view, setting):
        author, reader, topic = setting
        post = await post_service.create_post(author, topic.id, PostCreate(title="a", content="b"))

        comment = await post_service.add_comment(reader, post.id, CommentCreate(content="  nice "))
        aggregate = await post_view.find(db_session, post.id)

        assert comment.content == "nice"
        assert comment.author_id == reader.id
        assert aggregate is not None
        assert aggregate.comment_count == 1
        assert aggregate.popularity_score == pytest.approx(0.4)

    async def test_only_author_updates(self, post_service, setting):
        author, reader, topic = setting
        post = await post_service.create_post(author, topic.id, PostCreate(title="a", content="b"))

        with pytest.raises(ForbiddenException):
            await post_service.update_post(reader, post.id, PostUpdate(title="hijacked"))

        updated = await post_service.update_post(author, post.id, PostUpdate(title="edited"))

        assert updated.post.title == "edited"
        assert updated.post.content == "b"

    async def test_delete_post(self, db_session, post_service, post_view, topic_view, setting):
        author, _, topic = setting
        post = await post_service.create_post(author, topic.id, PostCreate(title="a", content="b"))

        await post_service.delete_post(author, post.id)

        assert await post_view.find(db_session, post.id) is None
        topic_aggregate = await topic_view.find(db_session, topic.id)
        assert topic_aggregate is not None
        assert topic_aggregate.post_count == 0

    async def test_engagement_on_missing_post(self, post_service, setting):
        _, reader, _ = setting

        with pytest.raises(NotFoundError):
            await post_service.like(reader, "missing")


def test_post_update_requires_a_change():
    with pytest.raises(ValueError):
        PostUpdate()
