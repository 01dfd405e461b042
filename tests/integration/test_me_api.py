"""HTTP tests for the acting user's listings."""

from __future__ import annotations

from api_helpers import API, as_user


def _ids(response) -> list[str]:
    assert response.status_code == 200, response.text
    return [item["id"] for item in response.json()]


async def test_me_requires_acting_user(client, register):
    ada = await register("ada")

    me = await client.get(f"{API}/me", headers=as_user(ada))
    anonymous = await client.get(f"{API}/me/following")

    assert me.status_code == 200
    assert me.json()["username"] == "ada"
    assert anonymous.status_code == 401
    assert anonymous.json()["type"] == "unauthorized"


async def test_following_pages(client, register, create_topic):
    owner = await register("owner")
    reader = await register("reader")
    first_topic = await create_topic(owner, "python")
    await create_topic(owner, "rust")
    third_topic = await create_topic(owner, "go")
    for topic in (first_topic, third_topic):
        await client.put(f"{API}/topics/{topic['id']}/followers", headers=as_user(reader))

    first = await client.get(
        f"{API}/me/following", params={"limit": 1}, headers=as_user(reader)
    )
    second = await client.get(
        f"{API}/me/following",
        params={"limit": 1, "page_token": first.headers["next_page"]},
        headers=as_user(reader),
    )
    owners_view = await client.get(f"{API}/me/following", headers=as_user(owner))

    assert _ids(first) == [third_topic["id"]]
    assert _ids(second) == [first_topic["id"]]
    assert _ids(owners_view) == []


async def test_ownership_posts(client, seeded, register, create_post):
    stranger = await register("stranger")
    await create_post(stranger, seeded["topic"], "Not mine")

    response = await client.get(
        f"{API}/me/ownership/posts", headers=as_user(seeded["author"])
    )

    assert _ids(response) == [p["id"] for p in reversed(seeded["posts"])]
    assert all(item["userActivity"]["liked"] is False for item in response.json())


async def test_ownership_posts_honour_filters(client, seeded):
    response = await client.get(
        f"{API}/me/ownership/posts",
        params={"filter.likeCount.gte": "4", "sort": "likeCount:asc"},
        headers=as_user(seeded["author"]),
    )

    assert _ids(response) == [seeded["posts"][3]["id"], seeded["posts"][4]["id"]]


async def test_ownership_topics(client, register, create_topic):
    alice = await register("alice")
    bob = await register("bob")
    mine = await create_topic(alice, "mine")
    await create_topic(bob, "theirs")

    response = await client.get(f"{API}/me/ownership/topics", headers=as_user(alice))

    assert _ids(response) == [mine["id"]]


async def test_ownership_filter_for_another_owner(client, register):
    alice = await register("alice")
    bob = await register("bob")

    response = await client.get(
        f"{API}/me/ownership/topics",
        params={"filter.owner": bob["id"]},
        headers=as_user(alice),
    )

    assert response.status_code == 400
    assert response.json()["type"] == "invalid-field"
