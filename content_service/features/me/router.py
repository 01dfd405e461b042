"""API router for the acting user's own content.

Every listing is a regular paginated aggregate read pinned to the
``X-User-Id`` caller, so the usual ``filter.*``, ``sort`` and ``page_token``
parameters apply.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from sqlalchemy import select

from content_service.core.dependencies.auth import CurrentUser
from content_service.core.dependencies.database import SessionDep
from content_service.core.dependencies.pagination import Pagination
from content_service.core.models import Follower, TopicAggregate
from content_service.core.schemas import ProblemDetails
from content_service.features.posts.router import PostServiceDep, PostViewDep
from content_service.features.posts.schemas import PostAggregateRead
from content_service.features.topics.router import TopicViewDep
from content_service.features.topics.schemas import TopicAggregateRead
from content_service.features.users.schemas import UserRead

router = APIRouter(prefix="/me", tags=["me"])

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ProblemDetails, "description": "Invalid field or malformed page token"},
    401: {"model": ProblemDetails, "description": "Missing or unknown X-User-Id"},
    503: {"model": ProblemDetails, "description": "Store temporarily unavailable"},
}


@router.get("", response_model=UserRead, summary="Get the acting user", responses=ERROR_RESPONSES)
async def get_me(user: CurrentUser) -> UserRead:
    return UserRead.model_validate(user)


@router.get(
    "/following",
    response_model=list[TopicAggregateRead],
    summary="Topics I follow",
    responses=ERROR_RESPONSES,
)
async def list_following(
    response: Response,
    user: CurrentUser,
    session: SessionDep,
    view: TopicViewDep,
    pagination: Pagination,
) -> list[TopicAggregateRead]:
    followed = select(Follower.followable_id).where(Follower.user_id == user.id)
    page = await view.find_all(session, pagination, scope=[TopicAggregate.id.in_(followed)])
    response.headers.update(page.to_headers())
    return page.items


@router.get(
    "/ownership/posts",
    response_model=list[PostAggregateRead],
    summary="Posts I wrote",
    responses=ERROR_RESPONSES,
)
async def list_my_posts(
    response: Response,
    user: CurrentUser,
    session: SessionDep,
    view: PostViewDep,
    service: PostServiceDep,
    pagination: Pagination,
) -> list[PostAggregateRead]:
    page = await view.find_all(session, pagination.with_scope("author", user.id))
    response.headers.update(page.to_headers())
    return await service.with_activity(user, page.items)


@router.get(
    "/ownership/topics",
    response_model=list[TopicAggregateRead],
    summary="Topics I own",
    responses=ERROR_RESPONSES,
)
async def list_my_topics(
    response: Response,
    user: CurrentUser,
    session: SessionDep,
    view: TopicViewDep,
    pagination: Pagination,
) -> list[TopicAggregateRead]:
    page = await view.find_all(session, pagination.with_scope("owner", user.id))
    response.headers.update(page.to_headers())
    return page.items


__all__ = ["router"]
