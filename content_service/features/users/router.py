"""API router for users.

Users are mirrored from the identity service so that aggregates can
denormalize author and owner names.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from content_service.core.dependencies.database import SessionDep
from content_service.core.exceptions import ConflictException, NotFoundException
from content_service.core.models import User
from content_service.core.schemas import ProblemDetails
from content_service.features.users.repository import UserRepository
from content_service.features.users.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

logger = logging.getLogger(__name__)


def get_user_repository() -> UserRepository:
    return UserRepository()


UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={409: {"model": ProblemDetails, "description": "Username taken"}},
)
async def create_user(
    payload: UserCreate,
    session: SessionDep,
    repository: UserRepoDep,
) -> UserRead:
    if await repository.find_by_username(session, payload.username) is not None:
        raise ConflictException(
            f"User '{payload.username}' already exists",
            type="user-conflict",
            extra={"field": "username", "value": payload.username},
        )
    user = await repository.create(session, User(username=payload.username, email=payload.email))
    await session.commit()
    logger.info("User registered", extra={"user_id": user.id})
    return UserRead.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get a user",
    responses={404: {"model": ProblemDetails, "description": "User not found"}},
)
async def get_user(user_id: str, session: SessionDep, repository: UserRepoDep) -> UserRead:
    user = await repository.get(session, user_id)
    if user is None:
        raise NotFoundException(
            f"User {user_id} not found", type="user-not-found", extra={"user_id": user_id}
        )
    return UserRead.model_validate(user)


__all__ = ["router"]
