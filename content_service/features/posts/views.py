"""Post aggregate view.

Joins a post with its author, topic, likes, viewers and comments.

Popularity is a fixed linear policy over raw counts::

    popularity_score = like_count * 0.8 + comment_count * 0.4 + view_count * 0.1
"""

from __future__ import annotations

from content_service.core.models import Comment, Like, Post, PostAggregate, Topic, User, Viewer
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
from content_service.features.posts.schemas import PostAggregateRead

POPULARITY_WEIGHTS = {"like_count": 0.8, "comment_count": 0.4, "view_count": 0.1}

POST_FIELDS = FieldMappingTable(
    PostAggregate,
    {
        "id": FieldMapping("id"),
        "author": FieldMapping("post.author.id"),
        "topic": FieldMapping("post.topic.id"),
        "title": FieldMapping("post.title"),
        "content": FieldMapping("post.content"),
        "createdAt": FieldMapping("post.created_at", FieldType.DATETIME),
        "updatedAt": FieldMapping("post.updated_at", FieldType.DATETIME),
        "likeCount": FieldMapping("like_count", FieldType.INTEGER),
        "viewCount": FieldMapping("view_count", FieldType.INTEGER),
        "commentCount": FieldMapping("comment_count", FieldType.INTEGER),
        "popularityScore": FieldMapping("popularity_score", FieldType.NUMBER),
    },
)


class PostAggregateView(AggregateView[PostAggregateRead]):
    name = "post_aggregates"
    aggregate_model = PostAggregate
    source_model = Post
    read_schema = PostAggregateRead
    fields = POST_FIELDS

    def build_pipeline(self, id: str) -> Pipeline:
        return Pipeline(
            [
                Match(Post, "id", id),
                Lookup(User, "author_id", "id", "author", unwind=True, preserve_empty=True),
                Lookup(Topic, "topic_id", "id", "topic", unwind=True, preserve_empty=True),
                Lookup(Like, "id", "likable_id", "likes"),
                Lookup(Viewer, "id", "viewable_id", "viewers"),
                Lookup(Comment, "id", "post_id", "comments"),
                Project(
                    {
                        "id": Ref("id"),
                        "post": Document(
                            {
                                "id": Ref("id"),
                                "title": Ref("title"),
                                "content": Ref("content"),
                                "created_at": Ref("created_at"),
                                "updated_at": Ref("updated_at"),
                                "author": Document(
                                    {"id": Ref("author.id"), "username": Ref("author.username")},
                                    when="author",
                                ),
                                "topic": Document(
                                    {"id": Ref("topic.id"), "topic_name": Ref("topic.topic_name")},
                                    when="topic",
                                ),
                            }
                        ),
                        "liked_user_ids": Ref("likes.user_id"),
                        "viewer_ids": Ref("viewers.user_id"),
                        "like_count": Size("likes"),
                        "view_count": Size("viewers"),
                        "comment_count": Size("comments"),
                        "last_updated": Now(),
                    }
                ),
                AddFields({"popularity_score": WeightedSum(POPULARITY_WEIGHTS)}),
            ]
        )


_post_view: PostAggregateView | None = None


def get_post_view() -> PostAggregateView:
    """Get the shared PostAggregateView instance."""
    global _post_view
    if _post_view is None:
        _post_view = PostAggregateView()
    return _post_view


__all__ = ["POPULARITY_WEIGHTS", "POST_FIELDS", "PostAggregateView", "get_post_view"]
