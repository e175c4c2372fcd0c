from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_504_GATEWAY_TIMEOUT,
)

from ..logging_utils import get_logger

log = get_logger(__name__)


class ApiError(BaseModel):
    error: str


class ProxyError(Exception):
    """Base for every error a proxy handler turns into a JSON error payload."""

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProxyError):
    """Malformed or empty input. Raised before any upstream call."""

    status_code = HTTP_400_BAD_REQUEST


class ConfigurationError(ProxyError):
    """A required credential or setting is missing."""


class UpstreamError(ProxyError):
    """The external AI service answered with an error or an unusable body."""

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        upstream_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class UpstreamTimeoutError(UpstreamError):
    status_code = HTTP_504_GATEWAY_TIMEOUT


class ParseError(Exception):
    """A model reply held no decodable JSON object. Recovered locally."""


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    payload = ApiError(error=message).model_dump()
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    extra: dict[str, Any] = {
        "path": request.url.path,
        "status": exc.status_code,
        "error_type": type(exc).__name__,
    }
    if isinstance(exc, UpstreamError):
        extra["upstream_status"] = exc.upstream_status
    level = log.warning if exc.status_code < HTTP_500_INTERNAL_SERVER_ERROR else log.error
    level(exc.message, extra=extra)
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Routing errors (404 / 405) in the same {"error": ...} shape as everything else
    log.warning(
        "HTTPException",
        extra={"path": request.url.path, "status": exc.status_code, "detail": exc.detail},
    )
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    log.warning(
        "Request validation failed",
        extra={"path": request.url.path, "details": exc.errors()},
    )
    return error_response(HTTP_400_BAD_REQUEST, "Invalid request body")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("Unhandled exception", extra={"path": request.url.path}, exc_info=exc)
    return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Unknown error occurred")


__all__ = [
    "ApiError",
    "ConfigurationError",
    "ParseError",
    "ProxyError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ValidationError",
    "error_response",
    "generic_exception_handler",
    "http_exception_handler",
    "proxy_error_handler",
    "validation_exception_handler",
]
