"""API router for the topics feature."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from content_service.core.dependencies.auth import CurrentUser
from content_service.core.dependencies.database import SessionDep
from content_service.core.dependencies.pagination import Pagination, SearchPagination
from content_service.core.exceptions import NotFoundException
from content_service.core.schemas import ProblemDetails
from content_service.features.topics.schemas import (
    TopicAggregateRead,
    TopicCreate,
    TopicUpdate,
)
from content_service.features.topics.search import TopicSearchIndex, get_topic_search_index
from content_service.features.topics.service import TopicService
from content_service.features.topics.views import TopicAggregateView, get_topic_view

router = APIRouter(prefix="/topics", tags=["topics"])

logger = logging.getLogger(__name__)

ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ProblemDetails, "description": "Invalid field or malformed page token"},
    404: {"model": ProblemDetails, "description": "Topic not found"},
    503: {"model": ProblemDetails, "description": "Store temporarily unavailable"},
}

TopicViewDep = Annotated[TopicAggregateView, Depends(get_topic_view)]
TopicSearchDep = Annotated[TopicSearchIndex, Depends(get_topic_search_index)]


def get_topic_service(session: SessionDep) -> TopicService:
    return TopicService(session)


TopicServiceDep = Annotated[TopicService, Depends(get_topic_service)]


@router.get(
    "",
    response_model=list[TopicAggregateRead],
    summary="List topics",
    description="""
Filter with `filter.<field>[.<op>]=<value>`, sort with `sort=<field>[:asc|:desc]`.

Fields: `id`, `owner`, `topicName`, `createdAt`, `updatedAt`, `followerCount`,
`postCount`, `popularityScore`.
""",
    responses=ERROR_RESPONSES,
)
async def list_topics(
    response: Response,
    session: SessionDep,
    view: TopicViewDep,
    pagination: Pagination,
) -> list[TopicAggregateRead]:
    page = await view.find_all(session, pagination)
    response.headers.update(page.to_headers())
    return page.items


@router.get(
    "/search",
    response_model=list[TopicAggregateRead],
    summary="Search topics",
    description="Fuzzy search over name, description and tags, boosted by popularity.",
    responses=ERROR_RESPONSES,
)
async def search_topics(
    response: Response,
    session: SessionDep,
    index: TopicSearchDep,
    pagination: SearchPagination,
    q: Annotated[str, Query(description="Search text")] = "",
    boost: Annotated[float | None, Query(ge=0, description="Popularity boost")] = None,
) -> list[TopicAggregateRead]:
    page = await index.search(session, q, pagination, boost=boost)
    response.headers.update(page.to_headers())
    return page.items


@router.post(
    "",
    response_model=TopicAggregateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a topic",
    responses={**ERROR_RESPONSES, 409: {"model": ProblemDetails, "description": "Name taken"}},
)
async def create_topic(
    payload: TopicCreate,
    user: CurrentUser,
    session: SessionDep,
    service: TopicServiceDep,
) -> TopicAggregateRead:
    aggregate = await service.create_topic(user, payload)
    await session.commit()
    return aggregate


@router.get(
    "/{topic_id}",
    response_model=TopicAggregateRead,
    summary="Get a topic",
    responses=ERROR_RESPONSES,
)
async def get_topic(
    topic_id: str,
    session: SessionDep,
    view: TopicViewDep,
) -> TopicAggregateRead:
    found = await view.find(session, topic_id)
    if found is None:
        raise NotFoundException(
            f"Topic {topic_id} not found", type="topic-not-found", extra={"topic_id": topic_id}
        )
    return found


@router.put(
    "/{topic_id}",
    response_model=TopicAggregateRead,
    summary="Edit a topic",
    description="Owner only. Renaming also refreshes the topic's posts.",
    responses={**ERROR_RESPONSES, 409: {"model": ProblemDetails, "description": "Name taken"}},
)
async def update_topic(
    topic_id: str,
    payload: TopicUpdate,
    user: CurrentUser,
    session: SessionDep,
    service: TopicServiceDep,
) -> TopicAggregateRead:
    aggregate = await service.update_topic(user, topic_id, payload)
    await session.commit()
    return aggregate


@router.delete(
    "/{topic_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a topic",
    description="Deletes the topic, its posts and their engagement. Owner only.",
    responses=ERROR_RESPONSES,
)
async def delete_topic(
    topic_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: TopicServiceDep,
) -> None:
    await service.delete_topic(user, topic_id)
    await session.commit()
    logger.info("Topic deleted via API", extra={"topic_id": topic_id})


@router.put(
    "/{topic_id}/followers",
    response_model=TopicAggregateRead,
    summary="Follow a topic",
    responses=ERROR_RESPONSES,
)
async def follow_topic(
    topic_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: TopicServiceDep,
) -> TopicAggregateRead:
    aggregate = await service.follow(user, topic_id)
    await session.commit()
    return aggregate


@router.delete(
    "/{topic_id}/followers",
    response_model=TopicAggregateRead,
    summary="Unfollow a topic",
    responses=ERROR_RESPONSES,
)
async def unfollow_topic(
    topic_id: str,
    user: CurrentUser,
    session: SessionDep,
    service: TopicServiceDep,
) -> TopicAggregateRead:
    aggregate = await service.unfollow(user, topic_id)
    await session.commit()
    return aggregate


__all__ = ["router"]
