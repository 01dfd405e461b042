"""Acting-user resolution.

Identity is verified upstream; requests carry the resolved user id in the
``X-User-Id`` header and this dependency only checks the user is known.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header

from content_service.core.dependencies.database import SessionDep
from content_service.core.exceptions import UnauthorizedException
from content_service.core.models import User
from content_service.infra.logging import set_log_context

logger = logging.getLogger(__name__)


async def get_current_user(
    session: SessionDep,
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> User:
    """Return the acting user named by ``X-User-Id``.

    Raises:
        UnauthorizedException: If the header is missing or names an unknown user.
    """
    if not x_user_id:
        raise UnauthorizedException("Missing X-User-Id header")

    user = await session.get(User, x_user_id)
    if user is None:
        logger.warning("Unknown acting user", extra={"user_id": x_user_id})
        raise UnauthorizedException("Unknown user", extra={"user_id": x_user_id})

    set_log_context(user_id=user.id)
    return user


async def get_optional_user(
    session: SessionDep,
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> User | None:
    """Like ``get_current_user`` but anonymous requests yield ``None``."""
    if not x_user_id:
        return None
    return await get_current_user(session, x_user_id)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]

__all__ = ["CurrentUser", "OptionalUser", "get_current_user", "get_optional_user"]
