"""Pydantic schemas for the topics feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from content_service.core.schemas import CustomBase, ReadModel


class TopicOwner(ReadModel):
    id: str
    username: str


class TopicSnapshot(ReadModel):
    """Topic fields denormalized into the aggregate."""

    id: str
    topic_name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    owner: TopicOwner | None = None


class TopicAggregateRead(ReadModel):
    """Materialized topic with follower and post counters."""

    id: str
    topic: TopicSnapshot
    follower_ids: list[str] = Field(default_factory=list)
    follower_count: int = 0
    post_count: int = 0
    popularity_score: float = 0.0
    last_updated: datetime


def _clean_tags(tags: list[str]) -> list[str]:
    return list(dict.fromkeys(tag.strip().lower() for tag in tags if tag.strip()))


class TopicCreate(CustomBase):
    """Payload for creating a topic."""

    topic_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return _clean_tags(value)


class TopicUpdate(CustomBase):
    """Partial update; at least one field is required. ``tags`` replaces the list."""

    topic_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    tags: list[str] | None = Field(default=None, max_length=20)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _clean_tags(value)

    @model_validator(mode="after")
    def _require_change(self) -> TopicUpdate:
        if not self.model_fields_set:
            msg = "Provide topic_name, description or tags"
            raise ValueError(msg)
        return self


__all__ = ["TopicAggregateRead", "TopicCreate", "TopicOwner", "TopicSnapshot", "TopicUpdate"]
