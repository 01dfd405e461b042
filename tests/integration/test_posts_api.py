"""HTTP tests for post listing, engagement and search."""

from __future__ import annotations

import pytest
from api_helpers import API, as_user

PROBLEM_JSON = "application/problem+json"


def _ids(response) -> list[str]:
    return [item["id"] for item in response.json()]


class TestListTopicPosts:
    async def test_pages_newest_first(self, client, seeded):
        posts = seeded["posts"]
        url = f"{API}/topics/{seeded['topic']['id']}/posts"

        first = await client.get(url, params={"limit": 2})
        second = await client.get(
            url, params={"limit": 2, "page_token": first.headers["next_page"]}
        )
        third = await client.get(
            url, params={"limit": 2, "page_token": second.headers["next_page"]}
        )

        assert _ids(first) == [posts[4]["id"], posts[3]["id"]]
        assert _ids(second) == [posts[2]["id"], posts[1]["id"]]
        assert _ids(third) == [posts[0]["id"]]
        assert "next_page" not in third.headers

    async def test_engagement_counters(self, client, seeded):
        readers = seeded["readers"]

        response = await client.get(f"{API}/posts/{seeded['posts'][4]['id']}")
        body = response.json()

        assert response.status_code == 200
        assert body["likeCount"] == 5
        assert body["viewCount"] == 10
        assert body["commentCount"] == 5
        assert body["likedUserIds"] == [r["id"] for r in readers[:5]]
        assert body["popularityScore"] == pytest.approx(7.0)
        assert body["post"]["author"]["username"] == "author"
        assert body["post"]["topic"]["topicName"] == "python"

    async def test_unknown_topic_is_empty(self, client):
        response = await client.get(f"{API}/topics/does-not-exist/posts")

        assert response.status_code == 200
        assert response.json() == []
        assert "next_page" not in response.headers

    async def test_sorted_by_popularity(self, client, seeded):
        response = await client.get(
            f"{API}/topics/{seeded['topic']['id']}/posts", params={"sort": "likeCount:asc"}
        )

        assert _ids(response) == [p["id"] for p in seeded["posts"]]

    async def test_token_from_another_topic_is_rejected(self, client, seeded, create_topic):
        other = await create_topic(seeded["author"], "rust")
        first = await client.get(
            f"{API}/topics/{seeded['topic']['id']}/posts", params={"limit": 1}
        )

        response = await client.get(
            f"{API}/topics/{other['id']}/posts",
            params={"page_token": first.headers["next_page"]},
        )

        assert response.status_code == 400
        assert response.json()["type"] == "malformed-page-token"

    async def test_filter_for_another_topic_is_a_field_error(self, client, seeded, create_topic):
        other = await create_topic(seeded["author"], "rust")

        response = await client.get(
            f"{API}/topics/{seeded['topic']['id']}/posts", params={"filter.topic": other["id"]}
        )

        assert response.status_code == 400
        assert response.json()["type"] == "invalid-field"
        assert response.json()["field"] == "topic"


class TestListPosts:
    async def test_range_filter(self, client, seeded):
        response = await client.get(
            f"{API}/posts", params={"filter.likeCount.gte": "4", "sort": "likeCount:desc"}
        )

        assert _ids(response) == [seeded["posts"][4]["id"], seeded["posts"][3]["id"]]

    async def test_unknown_filter_field(self, client, seeded):
        response = await client.get(f"{API}/posts", params={"filter.invalidField": "x"})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        body = response.json()
        assert body["type"] == "invalid-field"
        assert body["field"] == "invalidField"
        assert "invalidField" in body["detail"]

    async def test_unknown_sort_field(self, client):
        response = await client.get(f"{API}/posts", params={"sort": "rating:desc"})

        assert response.status_code == 400
        assert response.json()["field"] == "rating"

    async def test_tampered_token(self, client, seeded):
        first = await client.get(f"{API}/posts", params={"limit": 1})
        token = first.headers["next_page"]
        tampered = ("B" if token[0] != "B" else "C") + token[1:]

        response = await client.get(f"{API}/posts", params={"page_token": tampered})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith(PROBLEM_JSON)
        assert response.json()["type"] == "malformed-page-token"


class TestPostWrites:
    async def test_requires_acting_user(self, client, seeded):
        url = f"{API}/topics/{seeded['topic']['id']}/posts"
        payload = {"title": "t", "content": "c"}

        missing = await client.post(url, json=payload)
        unknown = await client.post(url, json=payload, headers={"X-User-Id": "nobody"})

        assert missing.status_code == 401
        assert unknown.status_code == 401
        assert missing.json()["type"] == "unauthorized"

    async def test_post_in_unknown_topic(self, client, register):
        user = await register("writer")

        response = await client.post(
            f"{API}/topics/missing/posts",
            json={"title": "t", "content": "c"},
            headers=as_user(user),
        )

        assert response.status_code == 404
        assert response.json()["type"] == "topic-not-found"

    async def test_like_and_unlike(self, client, seeded):
        post_id = seeded["posts"][0]["id"]
        fan = seeded["readers"][9]

        liked = await client.put(f"{API}/posts/{post_id}/likes", headers=as_user(fan))
        unliked = await client.delete(f"{API}/posts/{post_id}/likes", headers=as_user(fan))

        assert liked.json()["likeCount"] == 2
        assert fan["id"] in liked.json()["likedUserIds"]
        assert unliked.json()["likeCount"] == 1

    async def test_user_activity_on_reads(self, client, seeded):
        post_id = seeded["posts"][0]["id"]
        reader = seeded["readers"][0]
        stranger = seeded["readers"][9]
        listing = {"filter.id": post_id}

        mine = await client.get(f"{API}/posts/{post_id}", headers=as_user(reader))
        theirs = await client.get(f"{API}/posts", params=listing, headers=as_user(stranger))
        anonymous = await client.get(f"{API}/posts", params=listing)

        activity = mine.json()["userActivity"]
        assert activity["liked"] is True
        assert activity["likedAt"] is not None
        assert activity["viewed"] is True
        assert activity["viewedAt"] is not None
        assert theirs.json()[0]["userActivity"] == {
            "liked": False,
            "likedAt": None,
            "viewed": False,
            "viewedAt": None,
        }
        assert anonymous.json()[0]["userActivity"] is None

    async def test_like_reports_activity(self, client, seeded):
        post_id = seeded["posts"][0]["id"]
        fan = seeded["readers"][9]

        liked = await client.put(f"{API}/posts/{post_id}/likes", headers=as_user(fan))

        assert liked.json()["userActivity"]["liked"] is True
        assert liked.json()["userActivity"]["viewed"] is False

    async def test_edit_and_delete(self, client, seeded):
        author = seeded["author"]
        stranger = seeded["readers"][0]
        post_id = seeded["posts"][0]["id"]
        url = f"{API}/posts/{post_id}"

        forbidden = await client.put(url, json={"title": "x"}, headers=as_user(stranger))
        edited = await client.put(url, json={"title": "Renamed"}, headers=as_user(author))
        deleted = await client.delete(url, headers=as_user(author))
        gone = await client.get(url)
        topic = await client.get(f"{API}/topics/{seeded['topic']['id']}")

        assert forbidden.status_code == 403
        assert edited.json()["post"]["title"] == "Renamed"
        assert deleted.status_code == 204
        assert gone.status_code == 404
        assert gone.json()["type"] == "post-not-found"
        assert topic.json()["postCount"] == 4

    async def test_comment(self, client, seeded):
        reader = seeded["readers"][0]
        post_id = seeded["posts"][0]["id"]

        response = await client.post(
            f"{API}/posts/{post_id}/comments", json={"content": "Great"}, headers=as_user(reader)
        )
        post = await client.get(f"{API}/posts/{post_id}")

        assert response.status_code == 201
        assert response.json()["postId"] == post_id
        assert response.json()["authorId"] == reader["id"]
        assert post.json()["commentCount"] == 2

    async def test_empty_comment_is_rejected(self, client, seeded):
        response = await client.post(
            f"{API}/posts/{seeded['posts'][0]['id']}/comments",
            json={"content": ""},
            headers=as_user(seeded["readers"][0]),
        )

        assert response.status_code == 422


class TestSearchPosts:
    async def test_popular_posts_rank_first(self, client, seeded):
        posts = seeded["posts"]

        response = await client.get(f"{API}/posts/search", params={"q": "post", "limit": 2})

        assert _ids(response) == [posts[4]["id"], posts[3]["id"]]
        assert "next_page" in response.headers

    async def test_continuation(self, client, seeded):
        first = await client.get(f"{API}/posts/search", params={"q": "pythn", "limit": 3})
        second = await client.get(
            f"{API}/posts/search",
            params={"q": "pythn", "limit": 3, "page_token": first.headers["next_page"]},
        )

        assert len(first.json()) == 3
        assert len(second.json()) == 2
        assert "next_page" not in second.headers
        assert set(_ids(first)).isdisjoint(_ids(second))

    async def test_blank_query(self, client):
        response = await client.get(f"{API}/posts/search", params={"q": "  "})

        assert response.status_code == 400
        assert response.json()["field"] == "q"

    async def test_negative_boost(self, client):
        response = await client.get(f"{API}/posts/search", params={"q": "python", "boost": "-1"})

        assert response.status_code == 422
