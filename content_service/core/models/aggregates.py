"""Materialized aggregate tables.

Each row is keyed 1:1 by the id of its source entity, without a foreign
key: an aggregate may briefly outlive its source until it is removed.
The denormalized snapshot is a JSON document; counters and scores are
typed columns so they can be filtered, sorted and indexed natively.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import Base, JSONDocument


class PostAggregate(Base):
    """Read model for a post with its engagement counters."""

    __tablename__ = "post_aggregates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    post: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    liked_user_ids: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    viewer_ids: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    popularity_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<PostAggregate(id={self.id}, popularity_score={self.popularity_score})>"


class TopicAggregate(Base):
    """Read model for a topic with follower and post counters."""

    __tablename__ = "topic_aggregates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    topic: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    follower_ids: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    follower_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    popularity_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, index=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<TopicAggregate(id={self.id}, popularity_score={self.popularity_score})>"
