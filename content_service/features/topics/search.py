"""Fuzzy search over topic aggregates (name, description and tags)."""

from __future__ import annotations

from content_service.core.search import SearchField, SearchIndex
from content_service.features.topics.schemas import TopicAggregateRead
from content_service.features.topics.views import get_topic_view


class TopicSearchIndex(SearchIndex[TopicAggregateRead]):
    search_fields = (
        SearchField("topic.topic_name"),
        SearchField("topic.description"),
        SearchField("topic.tags", multi=True),
    )


_topic_search_index: TopicSearchIndex | None = None


def get_topic_search_index() -> TopicSearchIndex:
    global _topic_search_index
    if _topic_search_index is None:
        _topic_search_index = TopicSearchIndex(get_topic_view())
    return _topic_search_index


__all__ = ["TopicSearchIndex", "get_topic_search_index"]
