"""HTTP tests for topics and users."""

from __future__ import annotations

import pytest
from api_helpers import API, as_user


class TestTopics:
    async def test_create_and_get(self, client, register):
        owner = await register("owner")

        created = await client.post(
            f"{API}/topics",
            json={"topic_name": "python", "description": "Snakes", "tags": ["Web", "web"]},
            headers=as_user(owner),
        )
        fetched = await client.get(f"{API}/topics/{created.json()['id']}")

        assert created.status_code == 201
        body = fetched.json()
        assert body["topic"]["topicName"] == "python"
        assert body["topic"]["tags"] == ["web"]
        assert body["topic"]["owner"]["id"] == owner["id"]
        assert body["followerCount"] == 0
        assert body["postCount"] == 0

    async def test_duplicate_name(self, client, register, create_topic):
        owner = await register("owner")
        await create_topic(owner, "python")

        response = await client.post(
            f"{API}/topics", json={"topic_name": "python"}, headers=as_user(owner)
        )

        assert response.status_code == 409
        assert response.json()["type"] == "topic-conflict"

    async def test_unknown_topic(self, client):
        response = await client.get(f"{API}/topics/missing")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"] == "topic-not-found"

    async def test_follow_unfollow(self, client, register, create_topic):
        owner = await register("owner")
        reader = await register("reader")
        topic = await create_topic(owner, "python")
        url = f"{API}/topics/{topic['id']}/followers"

        await client.put(url, headers=as_user(reader))
        followed = await client.put(url, headers=as_user(reader))
        unfollowed = await client.delete(url, headers=as_user(reader))

        assert followed.status_code == 200
        assert followed.json()["followerCount"] == 1
        assert followed.json()["followerIds"] == [reader["id"]]
        assert followed.json()["popularityScore"] == pytest.approx(0.7)
        assert unfollowed.json()["followerCount"] == 0

    async def test_follow_unknown_topic(self, client, register):
        reader = await register("reader")

        response = await client.put(f"{API}/topics/missing/followers", headers=as_user(reader))

        assert response.status_code == 404

    async def test_list_by_popularity(self, client, register, create_topic):
        owner = await register("owner")
        fans = [await register(f"fan{i}") for i in range(2)]
        quiet = await create_topic(owner, "quiet")
        busy = await create_topic(owner, "busy")
        for fan in fans:
            await client.put(f"{API}/topics/{busy['id']}/followers", headers=as_user(fan))

        first = await client.get(
            f"{API}/topics", params={"sort": "popularityScore:desc", "limit": 1}
        )
        second = await client.get(
            f"{API}/topics", params={"limit": 1, "page_token": first.headers["next_page"]}
        )

        assert [t["id"] for t in first.json()] == [busy["id"]]
        assert [t["id"] for t in second.json()] == [quiet["id"]]

    async def test_filter_by_owner(self, client, register, create_topic):
        alice = await register("alice")
        bob = await register("bob")
        mine = await create_topic(alice, "mine")
        await create_topic(bob, "theirs")

        response = await client.get(f"{API}/topics", params={"filter.owner": alice["id"]})

        assert [t["id"] for t in response.json()] == [mine["id"]]

    async def test_search(self, client, register, create_topic):
        owner = await register("owner")
        tagged = await create_topic(owner, "concurrency", tags=["asyncio"])
        await create_topic(owner, "gardening", description="Tomatoes and herbs")

        response = await client.get(f"{API}/topics/search", params={"q": "asyncoi"})

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [tagged["id"]]

    async def test_update(self, client, seeded):
        topic_url = f"{API}/topics/{seeded['topic']['id']}"
        changes = {"topic_name": "python3", "tags": ["Typing", "typing"]}

        forbidden = await client.put(topic_url, json=changes, headers=as_user(seeded["readers"][0]))
        updated = await client.put(topic_url, json=changes, headers=as_user(seeded["author"]))
        post = await client.get(f"{API}/posts/{seeded['posts'][0]['id']}")

        assert forbidden.status_code == 403
        assert updated.status_code == 200
        body = updated.json()
        assert body["topic"]["topicName"] == "python3"
        assert body["topic"]["tags"] == ["typing"]
        assert body["topic"]["description"] == "All things Python"
        assert body["postCount"] == 5
        assert post.json()["post"]["topic"]["topicName"] == "python3"

    async def test_update_clears_description(self, client, register, create_topic):
        owner = await register("owner")
        topic = await create_topic(owner, "python", description="Snakes")

        response = await client.put(
            f"{API}/topics/{topic['id']}", json={"description": None}, headers=as_user(owner)
        )

        assert response.status_code == 200
        assert response.json()["topic"]["description"] is None
        assert response.json()["topic"]["topicName"] == "python"

    async def test_update_to_taken_name(self, client, register, create_topic):
        owner = await register("owner")
        await create_topic(owner, "rust")
        topic = await create_topic(owner, "python")

        response = await client.put(
            f"{API}/topics/{topic['id']}", json={"topic_name": "rust"}, headers=as_user(owner)
        )

        assert response.status_code == 409
        assert response.json()["type"] == "topic-conflict"

    async def test_update_without_changes(self, client, register, create_topic):
        owner = await register("owner")
        topic = await create_topic(owner, "python")

        response = await client.put(f"{API}/topics/{topic['id']}", json={}, headers=as_user(owner))

        assert response.status_code == 422

    async def test_delete(self, client, seeded):
        topic_url = f"{API}/topics/{seeded['topic']['id']}"
        post_url = f"{API}/posts/{seeded['posts'][0]['id']}"

        forbidden = await client.delete(topic_url, headers=as_user(seeded["readers"][0]))
        deleted = await client.delete(topic_url, headers=as_user(seeded["author"]))

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert (await client.get(topic_url)).status_code == 404
        assert (await client.get(post_url)).status_code == 404


class TestUsers:
    async def test_register_and_get(self, client, register):
        user = await register("ada")

        response = await client.get(f"{API}/users/{user['id']}")

        assert response.status_code == 200
        assert response.json()["username"] == "ada"
        assert "createdAt" in response.json()

    async def test_duplicate_username(self, client, register):
        await register("ada")

        response = await client.post(f"{API}/users", json={"username": "ada"})

        assert response.status_code == 409
        assert response.json()["type"] == "user-conflict"

    @pytest.mark.parametrize("username", ["", "has space", "x" * 51])
    async def test_invalid_username(self, client, username):
        response = await client.post(f"{API}/users", json={"username": username})

        assert response.status_code == 422

    async def test_unknown_user(self, client):
        response = await client.get(f"{API}/users/missing")

        assert response.status_code == 404
        assert response.json()["type"] == "user-not-found"


async def test_metrics_endpoint(client, register):
    await register("ada")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "view_refresh_total" in response.text
    assert "http_requests_total" in response.text
