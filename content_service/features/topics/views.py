"""Topic aggregate view.

Joins a topic with its owner, followers and posts. Popularity weighs
followers above posts: ``follower_count * 0.7 + post_count * 0.3``.
"""

from __future__ import annotations

from content_service.core.models import Follower, Post, Topic, TopicAggregate, User
from content_service.core.pagination import FieldMapping, FieldMappingTable, FieldType
from content_service.core.views import (
    AddFields,
    AggregateView,
    Document,
    Lookup,
    Match,
    Now,
    Pipeline,
    Project,
    Ref,
    Size,
    WeightedSum,
)
from content_service.features.topics.schemas import TopicAggregateRead

POPULARITY_WEIGHTS = {"follower_count": 0.7, "post_count": 0.3}

TOPIC_FIELDS = FieldMappingTable(
    TopicAggregate,
    {
        "id": FieldMapping("id"),
        "owner": FieldMapping("topic.owner.id"),
        "topicName": FieldMapping("topic.topic_name"),
        "createdAt": FieldMapping("topic.created_at", FieldType.DATETIME),
        "updatedAt": FieldMapping("topic.updated_at", FieldType.DATETIME),
        "followerCount": FieldMapping("follower_count", FieldType.INTEGER),
        "postCount": FieldMapping("post_count", FieldType.INTEGER),
        "popularityScore": FieldMapping("popularity_score", FieldType.NUMBER),
    },
)


class TopicAggregateView(AggregateView[TopicAggregateRead]):
    name = "topic_aggregates"
    aggregate_model = TopicAggregate
    source_model = Topic
    read_schema = TopicAggregateRead
    fields = TOPIC_FIELDS

    def build_pipeline(self, id: str) -> Pipeline:
        return Pipeline(
            [
                Match(Topic, "id", id),
                Lookup(User, "owner_id", "id", "owner", unwind=True, preserve_empty=True),
                Lookup(Follower, "id", "followable_id", "followers"),
                Lookup(Post, "id", "topic_id", "posts"),
                Project(
                    {
                        "id": Ref("id"),
                        "topic": Document(
                            {
                                "id": Ref("id"),
                                "topic_name": Ref("topic_name"),
                                "description": Ref("description"),
                                "tags": Ref("tags"),
                                "created_at": Ref("created_at"),
                                "updated_at": Ref("updated_at"),
                                "owner": Document(
                                    {"id": Ref("owner.id"), "username": Ref("owner.username")},
                                    when="owner",
                                ),
                            }
                        ),
                        "follower_ids": Ref("followers.user_id"),
                        "follower_count": Size("followers"),
                        "post_count": Size("posts"),
                        "last_updated": Now(),
                    }
                ),
                AddFields({"popularity_score": WeightedSum(POPULARITY_WEIGHTS)}),
            ]
        )


_topic_view: TopicAggregateView | None = None


def get_topic_view() -> TopicAggregateView:
    """Get the shared TopicAggregateView instance."""
    global _topic_view
    if _topic_view is None:
        _topic_view = TopicAggregateView()
    return _topic_view


__all__ = ["POPULARITY_WEIGHTS", "TOPIC_FIELDS", "TopicAggregateView", "get_topic_view"]
