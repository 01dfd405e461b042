"""Unit tests for PaginationRequest parsing and PaginationResponse helpers."""

from __future__ import annotations

import pytest

from content_service.core.exceptions import InvalidFieldError, MalformedTokenError
from content_service.core.pagination import (
    FilterField,
    FilterOperator,
    PageToken,
    PageTokenCodec,
    PaginationRequest,
    PaginationResponse,
    SortDirection,
    SortField,
)


class TestFromQueryParams:
    """Query-parameter naming convention."""

    def test_defaults(self):
        request = PaginationRequest.from_query_params({})

        assert request.limit == 20
        assert request.filters == ()
        assert request.sort_fields == ()
        assert request.page_last_resource_id is None

    def test_limit_parsing(self):
        assert PaginationRequest.from_query_params({"limit": "5"}).limit == 5
        assert PaginationRequest.from_query_params({"limit": "abc"}).limit == 20
        assert PaginationRequest.from_query_params({"limit": "0"}).limit == 20
        assert PaginationRequest.from_query_params({"limit": "-3"}).limit == 20
        assert PaginationRequest.from_query_params({"limit": "5000"}).limit == 100

    def test_default_limit_override(self):
        assert PaginationRequest.from_query_params({}, default_limit=10).limit == 10

    def test_equality_and_range_filters(self):
        request = PaginationRequest.from_query_params(
            [
                ("filter.topic", "t-1"),
                ("filter.likeCount.gte", "3"),
                ("filter.likeCount.lt", "10"),
            ]
        )

        assert request.filters == (
            FilterField(field="topic", value="t-1"),
            FilterField(field="likeCount", value="3", operator=FilterOperator.GTE),
            FilterField(field="likeCount", value="10", operator=FilterOperator.LT),
        )

    def test_unknown_filter_operator(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            PaginationRequest.from_query_params({"filter.likeCount.between": "1"})

        assert exc_info.value.field == "likeCount"

    def test_sorts_repeated_and_comma_separated(self):
        request = PaginationRequest.from_query_params(
            [("sort", "createdAt:asc,title"), ("sort", "likeCount:DESC")]
        )

        assert request.sort_fields == (
            SortField(field="createdAt", direction=SortDirection.ASC),
            SortField(field="title", direction=SortDirection.DESC),
            SortField(field="likeCount", direction=SortDirection.DESC),
        )

    def test_unknown_sort_direction(self):
        with pytest.raises(InvalidFieldError):
            PaginationRequest.from_query_params({"sort": "title:sideways"})

    def test_page_token_is_authoritative(self):
        codec = PageTokenCodec("request-tests")
        token = PageToken(
            filters=(FilterField(field="topic", value="t-1"),),
            sort_fields=(SortField(field="createdAt"),),
            page_last_resource_id="last",
        )

        request = PaginationRequest.from_query_params(
            [("page_token", codec.encode(token)), ("filter.topic", "t-2"), ("sort", "title")],
            codec=codec,
        )

        assert request.page_token == token

    def test_bad_page_token(self):
        with pytest.raises(MalformedTokenError):
            PaginationRequest.from_query_params({"page_token": "not-a-token"})

    def test_blank_page_token_means_first_page(self):
        request = PaginationRequest.from_query_params({"page_token": "", "sort": "title"})

        assert request.page_last_resource_id is None
        assert request.sort_fields == (SortField(field="title"),)

    def test_unrelated_parameters_are_ignored(self):
        request = PaginationRequest.from_query_params({"q": "python", "boost": "2"})

        assert request == PaginationRequest()


class TestBuilders:
    """with_filter / with_sort / with_scope."""

    def test_builders_preserve_insertion_order(self):
        request = (
            PaginationRequest(limit=2)
            .with_sort("createdAt", "desc")
            .with_filter("topic", "t-1")
            .with_sort("title", SortDirection.ASC)
            .with_filter("likeCount", 3, "gte")
        )

        assert [s.field for s in request.sort_fields] == ["createdAt", "title"]
        assert [f.field for f in request.filters] == ["topic", "likeCount"]
        assert request.filters[1].operator is FilterOperator.GTE
        assert request.limit == 2

    def test_changing_the_query_restarts_pagination(self):
        request = PaginationRequest(page_token=PageToken(page_last_resource_id="x"))

        assert request.with_filter("topic", "t").page_last_resource_id is None

    def test_limit_is_clamped(self):
        assert PaginationRequest(limit=1000).limit == 100
        assert PaginationRequest().with_limit(7).limit == 7

    def test_with_scope_adds_the_filter(self):
        request = PaginationRequest().with_scope("topic", "t-1")

        assert request.filters == (FilterField(field="topic", value="t-1"),)

    def test_with_scope_accepts_a_matching_token(self):
        token = PageToken(
            filters=(FilterField(field="topic", value="t-1"),), page_last_resource_id="p"
        )
        request = PaginationRequest(page_token=token)

        assert request.with_scope("topic", "t-1") is request

    def test_with_scope_rejects_a_token_for_another_scope(self):
        token = PageToken(
            filters=(FilterField(field="topic", value="t-1"),), page_last_resource_id="p"
        )

        with pytest.raises(MalformedTokenError):
            PaginationRequest(page_token=token).with_scope("topic", "t-2")

    def test_with_scope_rejects_an_unscoped_continuation(self):
        token = PageToken(page_last_resource_id="p")

        with pytest.raises(MalformedTokenError):
            PaginationRequest(page_token=token).with_scope("topic", "t-1")

    def test_with_scope_conflicting_first_page_filter_is_a_field_error(self):
        request = PaginationRequest.from_query_params({"filter.topic": "t-2"})

        with pytest.raises(InvalidFieldError) as exc_info:
            request.with_scope("topic", "t-1")

        assert exc_info.value.field == "topic"
        assert "token" not in exc_info.value.detail


class TestPaginationResponse:
    """Header and mapping helpers."""

    def test_last_page_has_no_header(self):
        response = PaginationResponse[int](items=[1, 2])

        assert response.next_page is None
        assert response.to_headers() == {}

    def test_next_page_header(self):
        token = PageToken(page_last_resource_id="abc")
        response = PaginationResponse[int](items=[1], next_page_token=token)

        headers = response.to_headers()

        assert list(headers) == ["next_page"]
        assert PageToken.from_string(headers["next_page"]) == token
        assert response.to_headers("X-Next") == {"X-Next": headers["next_page"]}

    def test_map_keeps_token(self):
        token = PageToken(page_last_resource_id="abc")
        response = PaginationResponse[int](items=[1, 2], next_page_token=token)

        mapped = response.map(str)

        assert mapped.items == ["1", "2"]
        assert mapped.next_page_token == token
