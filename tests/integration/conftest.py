"""Fixtures for HTTP-level tests.

All data is created through the API so every request runs in its own
session and commits, exactly as in production.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from api_helpers import API, Json, as_user
from httpx import AsyncClient


@pytest.fixture
def register(client: AsyncClient) -> Callable[[str], Awaitable[Json]]:
    """Register a user and return its body."""

    async def _register(username: str) -> Json:
        response = await client.post(f"{API}/users", json={"username": username})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def create_topic(client: AsyncClient) -> Callable[..., Awaitable[Json]]:
    async def _create(owner: Json, topic_name: str, **fields: Any) -> Json:
        response = await client.post(
            f"{API}/topics", json={"topic_name": topic_name, **fields}, headers=as_user(owner)
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_post(client: AsyncClient) -> Callable[..., Awaitable[Json]]:
    async def _create(author: Json, topic: Json, title: str, content: str = "Body") -> Json:
        response = await client.post(
            f"{API}/topics/{topic['id']}/posts",
            json={"title": title, "content": content},
            headers=as_user(author),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
async def seeded(
    client: AsyncClient,
    register: Callable[[str], Awaitable[Json]],
    create_topic: Callable[..., Awaitable[Json]],
    create_post: Callable[..., Awaitable[Json]],
) -> Json:
    """Five posts in topic "python"; post ``i`` has i likes, i comments and 2i views.

    Returns ``author``, ``readers``, ``topic`` and ``posts`` (oldest first).
    """
    author = await register("author")
    readers = [await register(f"reader{i}") for i in range(1, 11)]
    topic = await create_topic(author, "python", description="All things Python")
    posts = []
    for i in range(1, 6):
        post = await create_post(author, topic, f"Post {i}", f"Python post number {i}")
        for reader in readers[:i]:
            liked = await client.put(f"{API}/posts/{post['id']}/likes", headers=as_user(reader))
            assert liked.status_code == 200, liked.text
            commented = await client.post(
                f"{API}/posts/{post['id']}/comments",
                json={"content": "Nice"},
                headers=as_user(reader),
            )
            assert commented.status_code == 201, commented.text
        for reader in readers[: 2 * i]:
            viewed = await client.get(f"{API}/posts/{post['id']}", headers=as_user(reader))
            assert viewed.status_code == 200, viewed.text
        posts.append(post)
    return {"author": author, "readers": readers, "topic": topic, "posts": posts}
