"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: in-memory SQLite engine and session
    - Data Fixtures: factories for users, topics, posts and engagement rows
    - Application Fixtures: FastAPI app and HTTP client bound to the test engine
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

# Run against in-memory SQLite; must be set before settings are first loaded
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("PAGINATION_TOKEN_SECRET", "test-page-token-secret")

from content_service.core.database.base import Base  # noqa: E402
from content_service.core.models import Comment, Like, Post, Topic, User, Viewer  # noqa: E402
from content_service.core.settings import clear_all_caches, get_db_settings  # noqa: E402
from content_service.infra.database.session import (  # noqa: E402
    build_engine,
    build_session_factory,
)

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    """Settings are cached per process; tests that override env vars get a fresh load."""
    clear_all_caches()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with all tables created.

    Built through ``build_engine`` so foreign keys are enforced exactly as
    in the running service. ``StaticPool`` keeps one connection so every
    session sees the same in-memory database.
    """
    engine = build_engine(
        get_db_settings(),
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session on the test engine; uncommitted work is rolled back afterwards."""
    session_factory = build_session_factory(db_engine)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory adding a flushed ``User``."""
    counter = 0

    async def _make(username: str | None = None) -> User:
        nonlocal counter
        counter += 1
        user = User(username=username or f"user{counter}")
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


@pytest.fixture
def make_topic(db_session: AsyncSession) -> Callable[..., Awaitable[Topic]]:
    """Factory adding a flushed ``Topic``."""
    counter = 0

    async def _make(owner: User | None = None, **fields: Any) -> Topic:
        nonlocal counter
        counter += 1
        fields.setdefault("topic_name", f"topic-{counter}")
        topic = Topic(owner_id=owner.id if owner else None, **fields)
        db_session.add(topic)
        await db_session.flush()
        return topic

    return _make


@pytest.fixture
def make_post(db_session: AsyncSession) -> Callable[..., Awaitable[Post]]:
    """Factory adding a flushed ``Post``; ``created_at`` may be given explicitly."""

    async def _make(
        author: User,
        topic: Topic,
        title: str = "A post",
        content: str = "Some content",
        created_at: datetime | None = None,
    ) -> Post:
        post = Post(author_id=author.id, topic_id=topic.id, title=title, content=content)
        if created_at is not None:
            post.created_at = created_at
            post.updated_at = created_at
        db_session.add(post)
        await db_session.flush()
        return post

    return _make


@pytest.fixture
def engage(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Record likes, views and comments on a post from the given users."""

    async def _engage(
        post: Post,
        *,
        likers: list[User] | None = None,
        viewers: list[User] | None = None,
        commenters: list[User] | None = None,
    ) -> None:
        db_session.add_all(Like(likable_id=post.id, user_id=u.id) for u in likers or [])
        db_session.add_all(Viewer(viewable_id=post.id, user_id=u.id) for u in viewers or [])
        db_session.add_all(
            Comment(post_id=post.id, author_id=u.id, content="nice") for u in commenters or []
        )
        await db_session.flush()

    return _engage


@pytest.fixture
async def five_posts(
    db_session: AsyncSession,
    make_user: Callable[..., Awaitable[User]],
    make_topic: Callable[..., Awaitable[Topic]],
    make_post: Callable[..., Awaitable[Post]],
    engage: Callable[..., Awaitable[None]],
) -> dict[str, Any]:
    """Five posts with increasing ``created_at``; post ``i`` has i likes, i comments, 2i views.

    Returns a mapping with the ``topic``, the ``author``, the ``posts``
    (oldest first) and the ``users`` pool used for engagement.
    """
    author = await make_user("author")
    users = [await make_user(f"reader{i}") for i in range(1, 11)]
    topic = await make_topic(author, topic_name="python")
    base = datetime(2025, 1, 1, tzinfo=UTC)
    posts = []
    for i in range(1, 6):
        post = await make_post(
            author, topic, title=f"Post {i}", created_at=base + timedelta(hours=i)
        )
        await engage(post, likers=users[:i], viewers=users[: 2 * i], commenters=users[:i])
        posts.append(post)
    return {"topic": topic, "author": author, "posts": posts, "users": users}


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(db_engine: AsyncEngine) -> FastAPI:
    """FastAPI application whose request sessions use the test engine."""
    from content_service.app.main import create_app
    from content_service.core.dependencies.database import get_db_session

    application = create_app()
    session_factory = build_session_factory(db_engine)

    async def _test_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = _test_session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTPX client against the app (lifespan not run; the engine fixture owns the schema)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
