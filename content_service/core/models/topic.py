"""Topic and follower models."""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import (
    Base,
    CreatedAtMixin,
    IntegerPKMixin,
    JSONDocument,
    TimestampMixin,
    UUIDv7PKMixin,
)


class Topic(Base, UUIDv7PKMixin, TimestampMixin):
    """A named channel that posts belong to and users follow."""

    __tablename__ = "topics"

    topic_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONDocument, default=list, nullable=False)
    owner_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True,
    )

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, topic_name={self.topic_name})>"


class Follower(Base, IntegerPKMixin, CreatedAtMixin):
    """A user following a topic. Key order is follow order."""

    __tablename__ = "followers"
    __table_args__ = (UniqueConstraint("followable_id", "user_id"),)

    followable_id: Mapped[str] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
