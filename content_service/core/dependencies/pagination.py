"""Pagination dependencies for FastAPI routes.

Query parameters follow the convention parsed by
``PaginationRequest.from_query_params``::

    GET /api/v1/posts?limit=20&filter.topic=<id>&sort=likeCount:desc
    GET /api/v1/posts?page_token=<token from the next_page header>
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from content_service.core.pagination import PaginationRequest
from content_service.core.settings import get_pagination_settings


def get_pagination_request(request: Request) -> PaginationRequest:
    """Build a ``PaginationRequest`` from the raw query string.

    Raises:
        InvalidFieldError: On unparseable filter or sort parameters.
        MalformedTokenError: If ``page_token`` does not decode.
    """
    return PaginationRequest.from_query_params(request.query_params)


def get_search_pagination_request(request: Request) -> PaginationRequest:
    """Same as ``get_pagination_request`` with the smaller search default limit."""
    return PaginationRequest.from_query_params(
        request.query_params,
        default_limit=get_pagination_settings().search_default_limit,
    )


Pagination = Annotated[PaginationRequest, Depends(get_pagination_request)]
SearchPagination = Annotated[PaginationRequest, Depends(get_search_pagination_request)]

__all__ = [
    "Pagination",
    "SearchPagination",
    "get_pagination_request",
    "get_search_pagination_request",
]
