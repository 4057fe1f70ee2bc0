"""Error types and the handlers that render them as API envelopes."""

import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base class for failures surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=message or type(self).message,
            headers=headers,
        )


class Unauthorized(ApiError):
    """Missing, unknown or expired token, or bad login credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class NotFound(ApiError):
    """Entity is absent or owned by another user."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found."


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    message = "Conflict"


def format_validation_errors(exc: RequestValidationError) -> str:
    """
    Flatten pydantic validation errors into ``"field: reason"`` messages.

    Args:
        exc (RequestValidationError): Error raised by FastAPI.

    Returns:
        str: Messages joined by ``", "``.
    """
    messages = []
    for error in exc.errors():
        loc = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "query", "path")
        ]
        field = ".".join(loc) or "request"
        messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return ", ".join(messages)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render any HTTP exception as ``{"data": null, "errors": detail}``."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"data": None, "errors": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 envelopes."""
    message = format_validation_errors(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=ValidationFailed.status_code,
        content={"data": None, "errors": message},
    )
