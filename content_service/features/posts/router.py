"""API router for the posts feature.

Paginated reads return the aggregate list as the body and the continuation
token in the ``next_page`` response header.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from content_service.core.dependencies.auth import CurrentUser, OptionalUser
from content_service.core.dependencies.database import SessionDep
from content_service.core.dependencies.pagination import Pagination, SearchPagination
from content_service.core.exceptions import NotFoundException
from content_service.core.schemas import ProblemDetails
from content_service.features.posts.schemas import (
    CommentCreate,
    CommentRead,
    PostAggregateRead,
    PostCreate,
    PostUpdate,
)
from content_service.features.posts.search import PostSearchIndex, get_post_search_index
from content_service.features.posts.service import PostService
from content_service.features.posts.views import PostAggregateView, get_post_view
from content_service.infra.logging import get_lazy_logger

router = APIRouter(tags=["posts"])

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ProblemDetails, "description": "Invalid field or malformed page token"},
    404: {"model": ProblemDetails, "description": "Resource not found"},
    503: {"model": ProblemDetails, "description": "Store temporarily unavailable"},
}

PostViewDep = Annotated[PostAggregateView, Depends(get_post_view)]
PostSearchDep = Annotated[PostSearchIndex, Depends(get_post_search_index)]


def get_post_service(session: SessionDep) -> PostService:
    return PostService(session)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]


@router.get(
    "/topics/{topic_id}/posts",
    response_model=list[PostAggregateRead],
    summary="List posts of a topic",
    responses=ERROR_RESPONSES,
)
async def list_topic_posts(
    topic_id: str,
    response: Response,
    session: SessionDep,
    view: PostViewDep,
    pagination: Pagination,
    user: OptionalUser,
    service: PostServiceDep,
) -> list[PostAggregateRead]:
    """Posts of ``topic_id``; accepts the same filter/sort parameters as ``GET /posts``."""
    page = await view.find_all(session, pagination.with_scope("topic", topic_id))
    response.headers.update(page.to_headers())
    return await service.with_activity(user, page.items)


@router.post(
    "/topics/{topic_id}/posts",
    response_model=PostAggregateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a post in a topic",
    responses=ERROR_RESPONSES,
)
async def create_post(
    topic_id: str,
    payload: PostCreate,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> PostAggregateRead:
    aggregate = await service.create_post(user, topic_id, payload)
    await session.commit()
    return await service.activity_for(user, aggregate)


@router.get(
    "/posts",
    response_model=list[PostAggregateRead],
    summary="List posts",
    description="""
Filter with `filter.<field>[.<op>]=<value>`, sort with `sort=<field>[:asc|:desc]`.

Fields: `id`, `author`, `topic`, `title`, `content`, `createdAt`, `updatedAt`,
`likeCount`, `viewCount`, `commentCount`, `popularityScore`.

Follow the `next_page` response header with `page_token=<value>` until it is absent.
""",
    responses=ERROR_RESPONSES,
)
async def list_posts(
    response: Response,
    session: SessionDep,
    view: PostViewDep,
    pagination: Pagination,
    user: OptionalUser,
    service: PostServiceDep,
) -> list[PostAggregateRead]:
    page = await view.find_all(session, pagination)
    response.headers.update(page.to_headers())
    return await service.with_activity(user, page.items)


@router.get(
    "/posts/search",
    response_model=list[PostAggregateRead],
    summary="Search posts",
    description="Fuzzy search over title and content, boosted by popularity.",
    responses=ERROR_RESPONSES,
)
async def search_posts(
    response: Response,
    session: SessionDep,
    index: PostSearchDep,
    pagination: SearchPagination,
    user: OptionalUser,
    service: PostServiceDep,
    q: Annotated[str, Query(description="Search text")] = "",
    boost: Annotated[float | None, Query(ge=0, description="Popularity boost")] = None,
) -> list[PostAggregateRead]:
    page = await index.search(session, q, pagination, boost=boost)
    response.headers.update(page.to_headers())
    lazy_logger.debug(lambda: f"search_posts({q!r}) -> {len(page.items)} results")
    return await service.with_activity(user, page.items)


@router.get(
    "/posts/{post_id}",
    response_model=PostAggregateRead,
    summary="Get a post",
    description="When `X-User-Id` is sent the view is recorded (once per user).",
    responses=ERROR_RESPONSES,
)
async def get_post(
    post_id: str,
    user: OptionalUser,
    session: SessionDep,
    view: PostViewDep,
    service: PostServiceDep,
) -> PostAggregateRead:
    if user is not None:
        aggregate = await service.view(user, post_id)
        await session.commit()
        return await service.activity_for(user, aggregate)

    found = await view.find(session, post_id)
    if found is None:
        raise NotFoundException(
            f"Post {post_id} not found", type="post-not-found", extra={"post_id": post_id}
        )
    return found


@router.put(
    "/posts/{post_id}",
    response_model=PostAggregateRead,
    summary="Edit a post",
    responses=ERROR_RESPONSES,
)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> PostAggregateRead:
    aggregate = await service.update_post(user, post_id, payload)
    await session.commit()
    return await service.activity_for(user, aggregate)


@router.delete(
    "/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a post",
    responses=ERROR_RESPONSES,
)
async def delete_post(
    post_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> None:
    await service.delete_post(user, post_id)
    await session.commit()
    logger.info("Post deleted via API", extra={"post_id": post_id})


@router.put(
    "/posts/{post_id}/likes",
    response_model=PostAggregateRead,
    summary="Like a post",
    responses=ERROR_RESPONSES,
)
async def like_post(
    post_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> PostAggregateRead:
    aggregate = await service.like(user, post_id)
    await session.commit()
    return await service.activity_for(user, aggregate)


@router.delete(
    "/posts/{post_id}/likes",
    response_model=PostAggregateRead,
    summary="Remove a like",
    responses=ERROR_RESPONSES,
)
async def unlike_post(
    post_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> PostAggregateRead:
    aggregate = await service.unlike(user, post_id)
    await session.commit()
    return await service.activity_for(user, aggregate)


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
    responses=ERROR_RESPONSES,
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    user: CurrentUser,
    session: SessionDep,
    service: PostServiceDep,
) -> CommentRead:
    comment = await service.add_comment(user, post_id, payload)
    await session.commit()
    return CommentRead.model_validate(comment)


__all__ = ["router"]
