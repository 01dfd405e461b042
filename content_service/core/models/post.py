"""Post model and its engagement rows (comments, likes, views).

Engagement rows use integer keys so that ascending key order is the
order in which the engagement was recorded.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import (
    Base,
    CreatedAtMixin,
    IntegerPKMixin,
    TimestampMixin,
    UUIDv7PKMixin,
)


class Post(Base, UUIDv7PKMixin, TimestampMixin):
    """A post published in a topic."""

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    topic_id: Mapped[str] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )

    __table_args__ = (Index("ix_posts_topic_id_created_at", "topic_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title={self.title}, topic_id={self.topic_id})>"


class Comment(Base, IntegerPKMixin, TimestampMixin):
    """A comment on a post."""

    __tablename__ = "comments"

    post_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    author_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)


class Like(Base, IntegerPKMixin, CreatedAtMixin):
    """A user's like on a post; at most one per (post, user)."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("likable_id", "user_id"),)

    likable_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )


class Viewer(Base, IntegerPKMixin, CreatedAtMixin):
    """A user having viewed a post; recorded once per (post, user)."""

    __tablename__ = "viewers"
    __table_args__ = (UniqueConstraint("viewable_id", "user_id"),)

    viewable_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
