"""Application exceptions and the handlers that turn them into responses.

Every error leaves the API in the same envelope:

    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }

Store errors are logged server-side and replaced with a generic message;
their detail never reaches the client.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ShipTrackException(Exception):
    """Base exception for ShipTrack application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.headers = headers
        super().__init__(self.message)


# ── 400 ──────────────────────────────────────────────────────

class InvalidInputError(ShipTrackException):
    """A required field is missing or malformed."""

    def __init__(self, message: str, error_code: str = "INVALID_INPUT"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
        )


class InvalidStatusError(InvalidInputError):
    """A status value outside its taxonomy."""

    def __init__(self, value: object, allowed: list[str]):
        self.value = value
        self.allowed = allowed
        super().__init__(
            message=f"Invalid status {value!r}. Must be one of: {', '.join(allowed)}",
            error_code="INVALID_STATUS",
        )


# ── 401 / 403 ────────────────────────────────────────────────

class UnauthorizedError(ShipTrackException):
    """Missing or invalid credential on a privileged path."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(ShipTrackException):
    """Authenticated, but lacking the required capability."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


# ── 404 ──────────────────────────────────────────────────────

class ResourceNotFoundError(ShipTrackException):
    """Exception for resources not found."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        error_code: str = "RESOURCE_NOT_FOUND",
    ):
        self.identifier = identifier
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
        )


class TrackingNotFoundError(ResourceNotFoundError):
    def __init__(self, tracking_number: str):
        super().__init__("Shipment", tracking_number, error_code="TRACKING_NOT_FOUND")


class ShipmentNotFoundError(ResourceNotFoundError):
    def __init__(self, shipment_id: str):
        super().__init__("Shipment", shipment_id, error_code="SHIPMENT_NOT_FOUND")


class QuoteNotFoundError(ResourceNotFoundError):
    def __init__(self, quote_id: str):
        super().__init__("Quote", quote_id, error_code="QUOTE_NOT_FOUND")


# ── 409 ──────────────────────────────────────────────────────

class IllegalTransitionError(ShipTrackException):
    """Status change rejected by a strict transition policy."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            message=f"Cannot move from '{current}' to '{target}'",
            status_code=status.HTTP_409_CONFLICT,
            error_code="ILLEGAL_TRANSITION",
        )


class TrackingNumberConflictError(ShipTrackException):
    """No free tracking number could be allocated."""

    def __init__(self, message: str = "Could not allocate a unique tracking number"):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="TRACKING_NUMBER_CONFLICT",
        )


# ── 429 ──────────────────────────────────────────────────────

class RateLimitExceededError(ShipTrackException):
    def __init__(self, retry_after: int, limit: int):
        self.retry_after = max(retry_after, 1)
        super().__init__(
            message=f"Rate limit exceeded. Try again in {self.retry_after} seconds.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="RATE_LIMIT_EXCEEDED",
            headers={
                "Retry-After": str(self.retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
            },
        )


# ── 5xx ──────────────────────────────────────────────────────

class StoreFailureError(ShipTrackException):
    """The backing store errored.  The message is always generic."""

    def __init__(
        self,
        message: str = "The service is temporarily unavailable. Please try again.",
        status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE,
        error_code: str = "STORE_FAILURE",
    ):
        super().__init__(message=message, status_code=status_code, error_code=error_code)


class StoreTimeoutError(StoreFailureError):
    def __init__(self):
        super().__init__(
            message="The service took too long to respond. Please try again.",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            error_code="STORE_TIMEOUT",
        )


class IdentityTimeoutError(ShipTrackException):
    def __init__(self):
        super().__init__(
            message="Identity verification timed out. Please try again.",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            error_code="IDENTITY_TIMEOUT",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create standardized error response."""
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
    )


async def shiptrack_exception_handler(
    request: Request,
    exc: ShipTrackException,
) -> JSONResponse:
    """Handle custom ShipTrack exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "ShipTrack exception: %s - %s",
        exc.error_code,
        exc.message,
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    if exc.status_code >= 500:
        logger.error(
            "HTTP %s: %s",
            exc.status_code,
            exc.detail,
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Malformed request bodies are client errors: 400 INVALID_INPUT."""
    logger.warning(
        "Validation error on %s",
        request.url.path,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Invalid request",
        error_code="INVALID_INPUT",
        details={"errors": errors},
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle integrity errors that escaped the services (unique races, FKs)."""
    logger.error(
        "Database integrity error on %s: %s",
        request.url.path,
        exc,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)

    if "unique" in error_msg.lower():
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT,
            message="A record with this value already exists",
            error_code="DUPLICATE_RECORD",
        )
    if "foreign key" in error_msg.lower():
        message = "Referenced record does not exist"
        error_code = "FOREIGN_KEY_VIOLATION"
    else:
        message = "Database constraint violation"
        error_code = "INTEGRITY_ERROR"

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message=message,
        error_code=error_code,
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    logger.error(
        "Database operational error on %s: %s",
        request.url.path,
        exc,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        "Unhandled exception on %s: %s",
        request.url.path,
        exc,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(ShipTrackException, shiptrack_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
