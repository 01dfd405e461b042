"""Pydantic schemas for users."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from content_service.core.schemas import CustomBase, ReadModel


class UserCreate(CustomBase):
    """Registers a user mirrored from the identity service."""

    username: str = Field(..., min_length=1, max_length=50, pattern=r"^[\w.-]+$")
    email: str | None = Field(default=None, max_length=255)


class UserRead(ReadModel):
    id: str
    username: str
    email: str | None = None
    created_at: datetime


__all__ = ["UserCreate", "UserRead"]
