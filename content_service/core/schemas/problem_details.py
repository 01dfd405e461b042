"""RFC 7807 error body (https://datatracker.ietf.org/doc/html/rfc7807)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ProblemDetails(BaseModel):
    """Error document returned as ``application/problem+json``.

    Extra members (``field``, ``operation``, ``post_id`` ...) are allowed and
    carry the specifics of each problem type.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "type": "invalid-field",
                "title": "Bad Request",
                "status": 400,
                "detail": "Unknown field 'invalidField'",
                "instance": "/api/v1/topics/0190a1b2/posts",
                "field": "invalidField",
            }
        },
    )

    type: str = "about:blank"
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    request_id: str | None = None
    errors: list[dict[str, Any]] | None = None
