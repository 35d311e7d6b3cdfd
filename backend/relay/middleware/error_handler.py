"""Error Handling for Relay.

The content core raises the exceptions defined here; the FastAPI handlers
at the bottom turn them into ``ErrorResponse`` bodies. Nothing below the
HTTP boundary builds responses itself.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ErrorResponse(BaseModel):
    """Body of every error response.

    Attributes:
        error: Machine-readable error type, e.g. ``not_found``
        message: Human-readable summary
        details: Structured context (resource ids, failing fields)
        path: Request path that failed
        timestamp: ISO 8601 time the error was produced
        request_id: Echo of the caller's ``X-Request-ID``
    """
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    path: Optional[str] = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: Optional[str] = None


class RelayException(Exception):
    """Root of the Relay error taxonomy.

    Carries the HTTP status it maps to so that transport code only has to
    translate, never classify.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error: str = "internal_error",
        message: str = "An internal error occurred",
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message)


class ValidationException(RelayException):
    """Malformed input supplied by the caller (422)."""

    def __init__(
        self,
        message: str = "Validation error",
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error="validation_error",
            message=message,
            details={"validation_errors": errors} if errors else None,
        )


class NotFoundException(RelayException):
    """Referenced post or tag does not exist (404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        details = {
            key: value
            for key, value in (("resource_type", resource_type), ("resource_id", resource_id))
            if value
        }
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="not_found",
            message=message,
            details=details or None,
        )


class ConflictException(RelayException):
    """A tag with the same slug already exists (409)."""

    def __init__(
        self,
        message: str = "Resource already exists",
        conflicting_field: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="conflict",
            message=message,
            details={"conflicting_field": conflicting_field} if conflicting_field else None,
        )


class StorageException(RelayException):
    """Relational constraint violation or filesystem failure (500)."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="storage_error",
            message=message,
            details={"operation": operation} if operation else None,
        )


class ExternalSyncException(RelayException):
    """Webhook or version-control failure (502).

    Raised by the best-effort publishers and swallowed by the publish
    orchestrator; it never reaches a publish caller.
    """

    def __init__(
        self,
        message: str = "External sync failed",
        service: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if service:
            merged["service"] = service
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="external_sync_error",
            message=message,
            details=merged or None,
        )


def format_validation_errors(errors) -> List[Dict[str, Any]]:
    """Flatten pydantic error dictionaries into field/message/type entries."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


def _respond(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        path=request.url.path,
        request_id=request.headers.get(REQUEST_ID_HEADER),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def relay_exception_handler(request: Request, exc: RelayException) -> JSONResponse:
    """Translate a ``RelayException`` into its HTTP status.

    Server-side failures log at ERROR, caller mistakes at WARNING.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"HTTP {exc.status_code}: {exc.error} - {exc.message}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": request.headers.get(REQUEST_ID_HEADER),
        },
    )
    return _respond(request, exc.status_code, exc.error, exc.message, exc.details, exc.headers)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report request body/query validation failures field by field."""
    errors = format_validation_errors(exc.errors())
    logger.warning(
        f"Validation error on {request.url.path}: {len(errors)} errors",
        extra={"errors": errors, "request_id": request.headers.get(REQUEST_ID_HEADER)},
    )
    return _respond(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        {"validation_errors": errors},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the traceback, answer with a generic 500."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": request.headers.get(REQUEST_ID_HEADER),
            "exception_type": type(exc).__name__,
        },
    )
    return _respond(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An internal server error occurred",
    )
