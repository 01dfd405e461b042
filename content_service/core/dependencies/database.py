"""Request-scoped database session.

Route handlers commit after the service call; a session closed without a
commit rolls back, so a failed refresh never leaves a partial aggregate.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from content_service.infra.database import get_async_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    async with get_async_session() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

__all__ = ["SessionDep", "get_db_session"]
