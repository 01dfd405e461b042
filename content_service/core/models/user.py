"""User model.

Identity is owned by an external service; this table mirrors the fields
the content backend denormalizes into aggregates.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import Base, CreatedAtMixin, UUIDv7PKMixin


class User(Base, UUIDv7PKMixin, CreatedAtMixin):
    """Known user (author, liker, viewer, follower)."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
