"""Repository for users."""

from __future__ import annotations

from typing import TYPE_CHECKING

from content_service.core.database import BaseRepository
from content_service.core.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(BaseRepository[User]):
    model = User

    async def find_by_username(self, session: AsyncSession, username: str) -> User | None:
        return await self.find_one(session, User.username == username)


__all__ = ["UserRepository"]
