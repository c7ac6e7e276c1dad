"""
Error taxonomy and HTTP rendering for the ledger API.

Every failure a client can see is an AppError subclass rendered as
{"error": {"code", "message", "details"}}. Stack traces stay server-side.

Status mapping:
- 400 INVALID_INPUT          malformed period/kind, self-interaction,
                             missing or mistyped request fields
- 401 AUTHENTICATION_ERROR   missing or invalid bearer token
- 404 *_NOT_FOUND            capability, actor or grant absent
- 409 DUPLICATE_INTERACTION / ALREADY_SUBSCRIBED (no state changed)
- 429 DAILY_QUOTA_EXCEEDED   retry after the next UTC midnight
- 503 STORE_UNAVAILABLE      relational store unreachable
- 500 INTERNAL_ERROR         anything unexpected
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Leading loc entries naming where a field came from
_LOCATIONS = ("body", "path", "query", "header")


class AppError(Exception):
    """Base for every error with a stable code and HTTP status."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppError):
    """Request rejected as malformed (400)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, status.HTTP_400_BAD_REQUEST, details)


class InvalidInputError(ValidationError):
    """Malformed input, rejected before any store access."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.code = "INVALID_INPUT"
        self.field = field


class AuthenticationError(AppError):
    """Caller identity could not be established (401)."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status.HTTP_401_UNAUTHORIZED)


class NotFoundError(AppError):
    """Referenced entity does not exist (404)."""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__("NOT_FOUND", message, status.HTTP_404_NOT_FOUND)
        self.resource = resource


class ConflictError(AppError):
    """Request conflicts with existing state; nothing was written (409)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFLICT", message, status.HTTP_409_CONFLICT, details)


class RateLimitError(AppError):
    """Caller exhausted an allowance (429). retry_after is in seconds."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        details = {"retry_after_seconds": retry_after} if retry_after else {}
        super().__init__("RATE_LIMIT_EXCEEDED", message, status.HTTP_429_TOO_MANY_REQUESTS, details)
        self.retry_after = retry_after


class ServiceUnavailableError(AppError):
    """A dependency is down (503)."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__("SERVICE_UNAVAILABLE", message, status.HTTP_503_SERVICE_UNAVAILABLE)


class StoreUnavailableError(ServiceUnavailableError):
    """
    The relational store could not be reached or aborted the transaction.

    Transient; the caller decides whether to retry.
    """

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        super().__init__("Storage temporarily unavailable")
        self.code = "STORE_UNAVAILABLE"
        self.operation = operation
        self.cause = cause


# =============================================================================
# HTTP rendering
# =============================================================================

def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id(request: Request) -> str:
    """Upstream X-Correlation-ID, else the one stored on request.state, else a new one."""
    incoming = request.headers.get(CORRELATION_HEADER)
    if incoming:
        return incoming
    return getattr(request.state, "correlation_id", None) or generate_correlation_id()


def _error_response(error: AppError, request: Request, correlation_id: str) -> JSONResponse:
    log_fields = {
        "correlation_id": correlation_id,
        "error_code": error.code,
        "status_code": error.status_code,
        "path": request.url.path,
        "method": request.method,
    }
    # Conflicts, quota and not-found are business outcomes
    if error.status_code >= 500:
        logger.error("Request failed", extra=log_fields)
    else:
        logger.info("Request rejected", extra=log_fields)

    headers = {CORRELATION_HEADER: correlation_id}
    retry_after = getattr(error, "retry_after", None)
    if retry_after:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc, request, get_correlation_id(request))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field as INVALID_INPUT instead of FastAPI's 422 list."""
    field = None
    message = "Request validation failed"
    errors = exc.errors()
    if errors:
        first = errors[0]
        names = [str(part) for part in first.get("loc", ()) if part not in _LOCATIONS]
        field = ".".join(names) or None
        message = first.get("msg", message)
    error = InvalidInputError(message, field=field)
    return _error_response(error, request, get_correlation_id(request))


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence: tags every response with a correlation id and turns
    anything that escaped the route into the standard error shape.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = get_correlation_id(request)
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
        except AppError as exc:
            return _error_response(exc, request, correlation_id)
        except HTTPException as exc:
            logger.warning("HTTP exception", extra={
                "correlation_id": correlation_id,
                "status_code": exc.status_code,
                "path": request.url.path,
            })
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": {"code": "HTTP_ERROR", "message": str(exc.detail), "details": {}}},
                headers={CORRELATION_HEADER: correlation_id},
            )
        except Exception as exc:
            logger.exception("Unhandled exception", extra={
                "correlation_id": correlation_id,
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            })
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "An unexpected error occurred",
                        "details": {"correlation_id": correlation_id},
                    }
                },
                headers={CORRELATION_HEADER: correlation_id},
            )

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def register_error_handlers(app: FastAPI) -> None:
    """Install the AppError and validation handlers and the catch-all middleware on app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_middleware(ErrorHandlerMiddleware)
