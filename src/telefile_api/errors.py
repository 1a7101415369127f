"""Domain errors and the FastAPI handlers that render them in the response envelope."""
import logging

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from entity_store.errors import AlreadyExists, EntityNotFound, InvalidCursor, StorageUnavailable

logger = logging.getLogger(__name__)


class TeleFileError(Exception):
    """Base class for errors returned to API callers."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(TeleFileError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(TeleFileError):
    """Missing or empty required input, oversize payload or malformed URL."""


class PayloadTooLarge(ValidationError):
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File size exceeds the {limit // (1024 * 1024)}MB limit ({size} bytes).")


class NoContent(TeleFileError):
    """The file record exists but its content was never stored."""


class NotConfigured(TeleFileError):
    """The operation requires a credential that is not set."""


class FetchError(TeleFileError):
    """Downloading a file from a remote URL failed."""


class ForwardFailed(TeleFileError):
    """The messaging service rejected the document or answered ambiguously."""

    def __init__(self, message: str, upstream_status: int | None = None):
        self.upstream_status = upstream_status
        super().__init__(message)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def handle_telefile_errors(request: Request, exc: TeleFileError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def handle_store_errors(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, EntityNotFound):
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    if isinstance(exc, AlreadyExists):
        return error_response(status.HTTP_409_CONFLICT, str(exc))
    if isinstance(exc, InvalidCursor):
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    if isinstance(exc, StorageUnavailable):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Storage backend unavailable")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed request fields are reported as 400 like other validation errors."""
    errors = exc.errors()
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in errors
    )
    return error_response(status.HTTP_400_BAD_REQUEST, details or "Invalid request")


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in errors
    )
    return error_response(status.HTTP_400_BAD_REQUEST, details or "Invalid data")


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
