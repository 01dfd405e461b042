"""Unit tests for signed page tokens."""

from __future__ import annotations

import base64
import json

import pytest
from pydantic import ValidationError

from content_service.core.exceptions import MalformedTokenError
from content_service.core.pagination.token import (
    FilterField,
    FilterOperator,
    PageToken,
    PageTokenCodec,
    SortDirection,
    SortField,
    decode,
    encode,
)


@pytest.fixture
def codec() -> PageTokenCodec:
    return PageTokenCodec("unit-test-secret")


@pytest.fixture
def token() -> PageToken:
    return PageToken(
        filters=(
            FilterField(field="topic", value="0190a1b2-topic"),
            FilterField(field="likeCount", value=3, operator=FilterOperator.GTE),
            FilterField(field="popularityScore", value=1.5, operator=FilterOperator.LT),
            FilterField(field="pinned", value=True),
        ),
        sort_fields=(
            SortField(field="createdAt", direction=SortDirection.DESC),
            SortField(field="title", direction=SortDirection.ASC),
        ),
        page_last_resource_id="0190a1b2-c3d4-7e5f-8a9b-0c1d2e3f4a5b",
    )


class TestPageTokenCodec:
    """Encode/decode behaviour of PageTokenCodec."""

    def test_decode_inverts_encode(self, codec: PageTokenCodec, token: PageToken):
        """Every field, including value types, survives the trip."""
        decoded = codec.decode(codec.encode(token))

        assert decoded == token
        assert isinstance(decoded.filters[1].value, int)
        assert isinstance(decoded.filters[2].value, float)
        assert decoded.filters[3].value is True

    def test_empty_token_round_trips(self, codec: PageTokenCodec):
        assert codec.decode(codec.encode(PageToken())) == PageToken()

    def test_encoded_token_is_url_safe(self, codec: PageTokenCodec, token: PageToken):
        encoded = codec.encode(token)

        assert "=" not in encoded
        assert "+" not in encoded
        assert "/" not in encoded
        assert encoded.count(".") == 1

    def test_tampered_payload_is_rejected(self, codec: PageTokenCodec, token: PageToken):
        body, _, signature = codec.encode(token).partition(".")
        payload = json.loads(base64.urlsafe_b64decode(body + "=" * (-len(body) % 4)))
        payload["t"]["page_last_resource_id"] = "someone-else"
        forged = base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=").decode()

        with pytest.raises(MalformedTokenError):
            codec.decode(f"{forged}.{signature}")

    def test_token_from_another_secret_is_rejected(self, token: PageToken):
        foreign = PageTokenCodec("another-secret").encode(token)

        with pytest.raises(MalformedTokenError):
            PageTokenCodec("unit-test-secret").decode(foreign)

    @pytest.mark.parametrize("value", ["", "garbage", "abc.", ".abc", "a.b.c", "!!!.???"])
    def test_corrupt_strings_are_rejected(self, codec: PageTokenCodec, value: str):
        with pytest.raises(MalformedTokenError):
            codec.decode(value)

    def test_unknown_version_is_rejected(self, codec: PageTokenCodec):
        body = base64.urlsafe_b64encode(b'{"v":99,"t":{}}').rstrip(b"=").decode()
        signature = base64.urlsafe_b64encode(codec._sign(body)).rstrip(b"=").decode()

        with pytest.raises(MalformedTokenError):
            codec.decode(f"{body}.{signature}")

    def test_signed_but_invalid_payload_is_rejected(self, codec: PageTokenCodec):
        body = base64.urlsafe_b64encode(b'{"v":1,"t":{"filters":"nope"}}').rstrip(b"=").decode()
        signature = base64.urlsafe_b64encode(codec._sign(body)).rstrip(b"=").decode()

        with pytest.raises(MalformedTokenError):
            codec.decode(f"{body}.{signature}")

    def test_empty_secret_is_refused(self):
        with pytest.raises(ValueError):
            PageTokenCodec("")

    def test_malformed_token_maps_to_bad_request(self, codec: PageTokenCodec):
        with pytest.raises(MalformedTokenError) as exc_info:
            codec.decode("garbage")

        assert exc_info.value.status_code == 400
        assert exc_info.value.type == "malformed-page-token"


class TestPageToken:
    """PageToken value semantics."""

    def test_next_page_token_keeps_query(self, token: PageToken):
        advanced = token.next_page_token("next-id")

        assert advanced.filters == token.filters
        assert advanced.sort_fields == token.sort_fields
        assert advanced.page_last_resource_id == "next-id"
        assert token.page_last_resource_id != "next-id"

    def test_first_page_flag(self, token: PageToken):
        assert PageToken().is_first_page
        assert not token.is_first_page

    def test_default_codec_round_trip(self, token: PageToken):
        assert decode(encode(token)) == token
        assert PageToken.from_string(token.encode()) == token

    def test_tokens_are_immutable(self, token: PageToken):
        with pytest.raises(ValidationError):
            token.page_last_resource_id = "x"  # type: ignore[misc]
