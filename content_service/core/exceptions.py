"""Application exceptions rendered as RFC 7807 problem details.

Each subclass fixes an HTTP status, a default problem ``type`` and a
``title``; raise sites supply the ``detail`` and may narrow the type
(``post-not-found`` instead of ``not-found``). ``extra`` keys are merged
into the response body by the exception handler.

Example:
    raise NotFoundException(
        "Post 0190a1b2 not found",
        type="post-not-found",
        extra={"post_id": "0190a1b2"},
    )
"""

from __future__ import annotations

from typing import Any, ClassVar


class AppException(Exception):
    """Base for every error the API reports to clients.

    Attributes:
        status_code: HTTP status of the response.
        detail: Human-readable explanation of this occurrence.
        type: Problem type identifier.
        title: Short summary of the problem type.
        instance: URI of the occurrence; defaults to the request path.
        extra: Additional members of the problem document.
    """

    status_code: ClassVar[int] = 500
    default_type: ClassVar[str] = "about:blank"
    title: ClassVar[str] = "Internal Server Error"

    def __init__(
        self,
        detail: str,
        type: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail
        self.type = type or self.default_type
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)


class BadRequestException(AppException):
    status_code = 400
    default_type = "bad-request"
    title = "Bad Request"


class UnauthorizedException(AppException):
    """The request carries no known acting user."""

    status_code = 401
    default_type = "unauthorized"
    title = "Unauthorized"

    def __init__(
        self,
        detail: str = "Authentication required",
        type: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail, type=type, instance=instance, extra=extra)


class ForbiddenException(AppException):
    """The acting user may not modify the resource."""

    status_code = 403
    default_type = "forbidden"
    title = "Forbidden"


class NotFoundException(AppException):
    status_code = 404
    default_type = "not-found"
    title = "Not Found"


class ConflictException(AppException):
    """A uniqueness rule would be violated (topic name, username)."""

    status_code = 409
    default_type = "conflict"
    title = "Conflict"


class InvalidFieldError(BadRequestException):
    """A filter or sort names an undeclared field, or a value has the wrong type.

    Detected before any store round-trip. ``field`` is the offending
    client-facing name and is echoed in the problem document.
    """

    default_type = "invalid-field"

    def __init__(
        self,
        field: str,
        detail: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.field = field
        super().__init__(
            detail or f"Unknown field '{field}'",
            instance=instance,
            extra={"field": field, **(extra or {})},
        )


class MalformedTokenError(BadRequestException):
    """A page token failed to decode or verify, or its boundary is gone.

    Clients restart pagination from the first page.
    """

    default_type = "malformed-page-token"

    def __init__(
        self,
        detail: str = "Malformed page token",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail, instance=instance, extra=extra)


class ServiceUnavailableException(AppException):
    status_code = 503
    default_type = "service-unavailable"
    title = "Service Unavailable"


class StoreUnavailableError(ServiceUnavailableException):
    """Transient store failure (timeout, connection loss, pool exhaustion).

    Reads and refreshes are idempotent, so callers may retry with backoff.
    """

    default_type = "store-unavailable"

    def __init__(
        self,
        detail: str = "Backing store is temporarily unavailable",
        operation: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.operation = operation
        payload = dict(extra or {})
        if operation:
            payload["operation"] = operation
        super().__init__(detail, instance=instance, extra=payload)


__all__ = [
    "AppException",
    "BadRequestException",
    "ConflictException",
    "ForbiddenException",
    "InvalidFieldError",
    "MalformedTokenError",
    "NotFoundException",
    "ServiceUnavailableException",
    "StoreUnavailableError",
    "UnauthorizedException",
]
