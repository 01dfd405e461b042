"""Tests for store failure translation and the exception hierarchy."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from content_service.core.database import store_operation
from content_service.core.exceptions import (
    ConflictException,
    InvalidFieldError,
    MalformedTokenError,
    StoreUnavailableError,
    UnauthorizedException,
)


class TestStoreOperation:
    async def test_passes_through_when_fast(self) -> None:
        async with store_operation("noop", timeout=1.0):
            await asyncio.sleep(0)

    async def test_timeout_becomes_store_unavailable(self) -> None:
        with pytest.raises(StoreUnavailableError) as exc_info:
            async with store_operation("post_aggregates.find_all", timeout=0.01):
                await asyncio.sleep(1)

        assert exc_info.value.status_code == 503
        assert exc_info.value.extra == {"operation": "post_aggregates.find_all"}
        assert "timed out" in exc_info.value.detail

    async def test_operational_error_becomes_store_unavailable(self) -> None:
        with pytest.raises(StoreUnavailableError) as exc_info:
            async with store_operation("topic_aggregates.refresh"):
                raise OperationalError("SELECT 1", {}, ConnectionError("reset"))

        assert exc_info.value.type == "store-unavailable"
        assert exc_info.value.operation == "topic_aggregates.refresh"

    async def test_application_errors_are_not_translated(self) -> None:
        with pytest.raises(InvalidFieldError):
            async with store_operation("post_aggregates.find_all"):
                raise InvalidFieldError("rating")


class TestExceptionDefaults:
    def test_invalid_field_echoes_field(self) -> None:
        exc = InvalidFieldError("invalidField", extra={"hint": "see docs"})

        assert exc.status_code == 400
        assert exc.type == "invalid-field"
        assert exc.field == "invalidField"
        assert exc.extra == {"field": "invalidField", "hint": "see docs"}
        assert exc.detail == "Unknown field 'invalidField'"

    def test_malformed_token_defaults(self) -> None:
        exc = MalformedTokenError()

        assert exc.status_code == 400
        assert exc.type == "malformed-page-token"
        assert exc.title == "Bad Request"

    def test_type_can_be_narrowed_per_raise_site(self) -> None:
        exc = ConflictException("Topic 'python' already exists", type="topic-conflict")

        assert exc.status_code == 409
        assert exc.type == "topic-conflict"
        assert ConflictException("dup").type == "conflict"

    def test_unauthorized_has_default_detail(self) -> None:
        assert UnauthorizedException().detail == "Authentication required"
