"""Page tokens: self-describing, signed pagination cursors.

A page token carries everything needed to produce the next page: the
filters and sort fields of the original request and the id of the last
resource emitted. The server keeps no cursor state.

Wire format::

    base64url(json_payload) + "." + base64url(hmac_sha256(secret, base64url(json_payload)))

where the JSON payload is ``{"v": 1, "t": {...token fields...}}``. Padding
is stripped from both parts. Tokens are tamper-evident: any change to the
payload invalidates the signature. They are not encrypted, so they must not
carry anything the client may not see.

Example:
    token = PageToken(sort_fields=(SortField(field="createdAt"),))
    encoded = encode(token.next_page_token("0190a1b2-..."))
    assert decode(encoded) == token.next_page_token("0190a1b2-...")
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from content_service.core.exceptions import MalformedTokenError
from content_service.core.settings import get_pagination_settings
from content_service.infra.metrics.tracking import track_page_token_rejected

TOKEN_VERSION = 1

FilterValue = str | int | float | bool


class SortDirection(str, Enum):
    """Sort direction for a sort field."""

    ASC = "asc"
    DESC = "desc"

    @property
    def is_descending(self) -> bool:
        return self is SortDirection.DESC


class FilterOperator(str, Enum):
    """Comparison applied by a filter.

    Range operators are only valid for numeric and temporal fields.
    """

    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"

    @property
    def is_range(self) -> bool:
        return self is not FilterOperator.EQ


class FilterField(BaseModel):
    """A filter on a public field alias."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(min_length=1, description="Public field alias")
    value: FilterValue = Field(description="Value compared against the field")
    operator: FilterOperator = Field(default=FilterOperator.EQ)


class SortField(BaseModel):
    """A sort key on a public field alias."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(min_length=1, description="Public field alias")
    direction: SortDirection = Field(default=SortDirection.DESC)


class PageToken(BaseModel):
    """Continuation state for paginated reads.

    Attributes:
        filters: Filters that produced the page, in insertion order.
        sort_fields: Sort keys, most significant first.
        page_last_resource_id: Id of the last item on the previous page,
            or None for the first page.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    filters: tuple[FilterField, ...] = ()
    sort_fields: tuple[SortField, ...] = ()
    page_last_resource_id: str | None = None

    def next_page_token(self, last_resource_id: str) -> PageToken:
        """Return a token for the page after ``last_resource_id``."""
        return self.model_copy(update={"page_last_resource_id": last_resource_id})

    @property
    def is_first_page(self) -> bool:
        return self.page_last_resource_id is None

    def encode(self) -> str:
        """Encode with the default codec."""
        return default_codec().encode(self)

    @classmethod
    def from_string(cls, value: str) -> PageToken:
        """Decode with the default codec."""
        return default_codec().decode(value)


class PageTokenCodec:
    """Sign, encode and verify page tokens.

    Args:
        secret: HMAC key. Rotating it invalidates every outstanding token.
    """

    def __init__(self, secret: str | bytes) -> None:
        if not secret:
            msg = "Page token secret must not be empty"
            raise ValueError(msg)
        self._key = secret.encode() if isinstance(secret, str) else secret

    def encode(self, token: PageToken) -> str:
        """Encode a token to an opaque, URL-safe string."""
        payload = {"v": TOKEN_VERSION, "t": token.model_dump(mode="json")}
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        body = _b64encode(raw.encode())
        return f"{body}.{_b64encode(self._sign(body))}"

    def decode(self, value: str) -> PageToken:
        """Decode and verify a token.

        Raises:
            MalformedTokenError: If the string is corrupt, was not signed
                with this codec's secret, or uses an unsupported version.
        """
        body, sep, signature = value.partition(".")
        if not body or not sep or not signature:
            raise self._reject("format")

        try:
            provided = _b64decode(signature)
        except (binascii.Error, ValueError) as exc:
            raise self._reject("format") from exc
        if not hmac.compare_digest(provided, self._sign(body)):
            raise self._reject("signature")

        try:
            payload = json.loads(_b64decode(body))
        except (binascii.Error, ValueError) as exc:
            raise self._reject("payload") from exc

        if not isinstance(payload, dict) or payload.get("v") != TOKEN_VERSION:
            raise self._reject("version")

        try:
            return PageToken.model_validate(payload.get("t"))
        except ValidationError as exc:
            raise self._reject("payload") from exc

    def _sign(self, body: str) -> bytes:
        return hmac.new(self._key, body.encode(), hashlib.sha256).digest()

    @staticmethod
    def _reject(reason: str) -> MalformedTokenError:
        track_page_token_rejected(reason)
        return MalformedTokenError(
            "Page token is invalid; restart pagination from the first page",
            extra={"reason": reason},
        )


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def default_codec() -> PageTokenCodec:
    """Codec signed with PAGINATION_TOKEN_SECRET."""
    return PageTokenCodec(get_pagination_settings().token_secret.get_secret_value())


def encode(token: PageToken) -> str:
    """Encode ``token`` with the default codec."""
    return default_codec().encode(token)


def decode(value: str) -> PageToken:
    """Decode ``value`` with the default codec."""
    return default_codec().decode(value)


__all__ = [
    "FilterField",
    "FilterOperator",
    "FilterValue",
    "PageToken",
    "PageTokenCodec",
    "SortDirection",
    "SortField",
    "TOKEN_VERSION",
    "decode",
    "default_codec",
    "encode",
]
