"""Exception handlers turning every failure into Problem Details.

=================  ======  ==========================
Exception          Status  ``type``
=================  ======  ==========================
AppException       varies  ``exc.type``
NotFoundError      404     ``<model>-not-found``
RequestValidation  422     ``validation-error``
anything else      500     ``internal-error``
=================  ======  ==========================
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from content_service.core.database import NotFoundError
from content_service.core.exceptions import AppException
from content_service.core.schemas import ProblemDetails
from content_service.infra.metrics import tracking

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def problem_response(
    request: Request,
    *,
    status_code: int,
    type_: str,
    title: str,
    detail: str,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Render a problem document; ``extra`` never overrides the standard members."""
    body = ProblemDetails(
        type=type_,
        title=title,
        status=status_code,
        detail=detail,
        instance=instance or request.url.path,
        request_id=getattr(request.state, "request_id", None),
        errors=errors,
    ).model_dump(mode="json", exclude_none=True)
    for key, value in (extra or {}).items():
        body.setdefault(key, value)

    tracking.track_error(type_, request.url.path, status_code)
    return JSONResponse(body, status_code=status_code, media_type=PROBLEM_JSON)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "Request failed: %s",
        exc.detail,
        extra={"problem_type": exc.type, "status_code": exc.status_code},
    )
    response = problem_response(
        request,
        status_code=exc.status_code,
        type_=exc.type,
        title=exc.title,
        detail=exc.detail,
        instance=exc.instance,
        extra=exc.extra,
    )
    if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        response.headers["Retry-After"] = "1"
    return response


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    model = exc.model_name.lower()
    logger.info("%s not found", exc.model_name, extra={"identifier": exc.identifier})
    return problem_response(
        request,
        status_code=status.HTTP_404_NOT_FOUND,
        type_=f"{model}-not-found",
        title="Not Found",
        detail=str(exc),
        extra={f"{model}_{key}": value for key, value in exc.identifier.items()},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(map(str, error["loc"])),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", extra={"error_count": len(errors)})
    return problem_response(
        request,
        status_code=422,
        type_="validation-error",
        title="Validation Error",
        detail=f"{len(errors)} invalid request field(s)",
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    tracking.track_unhandled_exception(type(exc).__name__, request.url.path)
    logger.error("Unhandled %s", type(exc).__name__, exc_info=exc)
    return problem_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        type_="internal-error",
        title="Internal Server Error",
        detail="An unexpected error occurred",
    )


def configure_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["PROBLEM_JSON", "configure_exception_handlers", "problem_response"]
