"""Pydantic schemas for the posts feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from content_service.core.schemas import CustomBase, ReadModel


class PostAuthor(ReadModel):
    id: str
    username: str


class PostTopic(ReadModel):
    id: str
    topic_name: str


class PostSnapshot(ReadModel):
    """Post fields denormalized into the aggregate."""

    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    author: PostAuthor | None = None
    topic: PostTopic | None = None


class PostUserActivity(ReadModel):
    """The acting user's engagement with one post."""

    liked: bool = False
    liked_at: datetime | None = None
    viewed: bool = False
    viewed_at: datetime | None = None


class PostAggregateRead(ReadModel):
    """Materialized post with engagement counters.

    ``user_activity`` is filled per request for the ``X-User-Id`` caller
    and stays ``None`` on anonymous reads.
    """

    id: str
    post: PostSnapshot
    liked_user_ids: list[str] = Field(default_factory=list)
    viewer_ids: list[str] = Field(default_factory=list)
    like_count: int = 0
    view_count: int = 0
    comment_count: int = 0
    popularity_score: float = 0.0
    last_updated: datetime
    user_activity: PostUserActivity | None = None


class PostCreate(CustomBase):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class PostUpdate(CustomBase):
    """Partial update; at least one field is required."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _require_change(self) -> PostUpdate:
        if self.title is None and self.content is None:
            msg = "Provide title or content"
            raise ValueError(msg)
        return self


class CommentCreate(CustomBase):
    content: str = Field(..., min_length=1, max_length=10_000)


class CommentRead(ReadModel):
    id: int
    post_id: str
    author_id: str
    content: str
    created_at: datetime


__all__ = [
    "CommentCreate",
    "CommentRead",
    "PostAggregateRead",
    "PostAuthor",
    "PostCreate",
    "PostSnapshot",
    "PostTopic",
    "PostUpdate",
    "PostUserActivity",
]
