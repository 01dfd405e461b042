"""Fuzzy search over post aggregates (title and content)."""

from __future__ import annotations

from content_service.core.search import SearchField, SearchIndex
from content_service.features.posts.schemas import PostAggregateRead
from content_service.features.posts.views import get_post_view


class PostSearchIndex(SearchIndex[PostAggregateRead]):
    search_fields = (SearchField("post.title"), SearchField("post.content"))


_post_search_index: PostSearchIndex | None = None


def get_post_search_index() -> PostSearchIndex:
    global _post_search_index
    if _post_search_index is None:
        _post_search_index = PostSearchIndex(get_post_view())
    return _post_search_index


__all__ = ["PostSearchIndex", "get_post_search_index"]
