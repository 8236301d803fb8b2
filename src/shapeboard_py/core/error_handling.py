"""Exception handlers for the shapeboard-py HTTP API.

Every error is returned as a JSON body with a stable error code and the
request's correlation ID.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from litestar import Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

if TYPE_CHECKING:
    from litestar import Request
    from litestar.exceptions import HTTPException

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    500: "internal_error",
    503: "service_unavailable",
}


@dataclass
class ErrorDetail:
    """Details about a specific error."""

    field: str | None = None
    message: str = ""
    code: str = "error"


@dataclass
class ErrorResponse:
    """Structured error response format."""

    status: str = "error"
    message: str = ""
    code: str = "internal_error"
    correlation_id: str | None = None
    details: list[ErrorDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "code": self.code,
        }
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        if self.details:
            result["details"] = [{"field": d.field, "message": d.message, "code": d.code} for d in self.details]
        return result


def get_correlation_id(request: Request) -> str | None:
    """Extract the correlation ID set by the logging middleware, or from headers."""
    correlation_id = request.scope.get("state", {}).get("correlation_id")
    return correlation_id or request.headers.get("X-Correlation-ID")


def _json_error(error: ErrorResponse, status_code: int) -> Response[dict[str, Any]]:
    return Response(content=error.to_dict(), status_code=status_code, media_type="application/json")


def http_exception_handler(request: Request, exc: HTTPException) -> Response[dict[str, Any]]:
    """Handle Litestar HTTP exceptions, including validation failures."""
    correlation_id = get_correlation_id(request)
    code = _STATUS_CODES.get(exc.status_code, "error")

    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "HTTP exception",
        correlation_id=correlation_id,
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_code=code,
    )

    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _json_error(ErrorResponse(message=message, code=code, correlation_id=correlation_id), exc.status_code)


def not_found_handler(request: Request, exc: Exception) -> Response[dict[str, Any]]:
    """Handle ShapeNotFoundError and BoardNotFoundError."""
    correlation_id = get_correlation_id(request)
    id_field = "shape_id" if hasattr(exc, "shape_id") else "board_id"
    missing_id = getattr(exc, id_field, "unknown")

    logger.warning("Resource not found", correlation_id=correlation_id, path=request.url.path, **{id_field: missing_id})

    error = ErrorResponse(
        message=str(exc),
        code=id_field.replace("_id", "_not_found"),
        correlation_id=correlation_id,
        details=[ErrorDetail(field=id_field, message=str(exc), code="not_found")],
    )
    return _json_error(error, HTTP_404_NOT_FOUND)


def state_decode_handler(request: Request, exc: Exception) -> Response[dict[str, Any]]:
    """Handle StateDecodeError raised while importing a state document."""
    correlation_id = get_correlation_id(request)
    logger.warning("Rejected state document", correlation_id=correlation_id, error=str(exc))
    error = ErrorResponse(message=str(exc), code="invalid_state", correlation_id=correlation_id)
    return _json_error(error, HTTP_400_BAD_REQUEST)


def generic_exception_handler(request: Request, exc: Exception) -> Response[dict[str, Any]]:
    """Handle unexpected exceptions with a safe, generic response."""
    correlation_id = get_correlation_id(request)
    logger.exception(
        "Unhandled exception",
        correlation_id=correlation_id,
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    error = ErrorResponse(
        message="An unexpected error occurred. Please try again later.",
        code="internal_error",
        correlation_id=correlation_id,
    )
    return _json_error(error, HTTP_500_INTERNAL_SERVER_ERROR)


def get_exception_handlers() -> dict:
    """Get all exception handlers for the application.

    Returns:
        Dictionary mapping exception types to handler functions.
    """
    from litestar.exceptions import HTTPException

    from shapeboard_py.exceptions import BoardNotFoundError, ShapeNotFoundError, StateDecodeError

    return {
        HTTPException: http_exception_handler,
        BoardNotFoundError: not_found_handler,
        ShapeNotFoundError: not_found_handler,
        StateDecodeError: state_decode_handler,
        Exception: generic_exception_handler,
    }
