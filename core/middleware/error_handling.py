"""
Error handling for the HTTP layer.

Every error leaves the API in the same envelope:
``{"error": {"code", "message", "path", "method"}}`` with optional
``details`` and ``request_id``. Messages are sanitised so credentials never
reach a client or a log line.
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import WorkflowError, http_status_for

logger = logging.getLogger(__name__)

SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?(key|secret)["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'bearer\s+[A-Za-z0-9._-]+', re.IGNORECASE),
]


def sanitize_error_message(message: Any) -> str:
    """Redact credential-looking fragments from an error message."""
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)
    return sanitized


def error_envelope(
    code: str,
    message: str,
    path: str,
    method: str,
    details: Any = None,
    request_id: Optional[str] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "code": code,
        "message": message,
        "path": path,
        "method": method,
    }
    if details is not None:
        body["details"] = details
    if request_id:
        body["request_id"] = request_id
    return {"error": body}


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        }
        for error in exc.errors()
    ]


def classify_exception(
    exc: Exception, debug: bool = False
) -> tuple[int, str, str, Any]:
    """
    Map an exception to ``(status_code, code, message, details)`` and log it
    at a severity fitting its kind.
    """
    if isinstance(exc, WorkflowError):
        status_code = http_status_for(exc.code)
        log = logger.error if status_code >= 500 else logger.info
        log(f"Workflow error {exc.code}: {sanitize_error_message(exc.message)}")
        return status_code, exc.code, sanitize_error_message(exc.message), exc.details or None

    if isinstance(exc, StarletteHTTPException):
        return exc.status_code, "HTTP_EXCEPTION", sanitize_error_message(exc.detail), None

    if isinstance(exc, RequestValidationError):
        return (
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            format_validation_errors(exc),
        )

    details = None
    if debug:
        details = {
            "type": type(exc).__name__,
            "message": sanitize_error_message(exc),
            "traceback": traceback.format_exc(),
        }

    if isinstance(exc, IntegrityError):
        logger.warning("Database integrity constraint violated", exc_info=debug)
        return (
            status.HTTP_409_CONFLICT,
            "INTEGRITY_ERROR",
            "Database integrity constraint violated",
            details,
        )

    if isinstance(exc, OperationalError):
        logger.error("Database operational error", exc_info=True)
        return (
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "DATABASE_ERROR",
            "Database service temporarily unavailable",
            None,
        )

    if isinstance(exc, SQLAlchemyError):
        logger.error("Database error", exc_info=True)
        return (
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "DATABASE_ERROR",
            "A database error occurred",
            details,
        )

    if isinstance(exc, ValueError):
        message = sanitize_error_message(exc) or "Invalid input provided"
        logger.warning(f"Invalid input: {message}")
        return status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", message, None

    logger.error(
        f"Unhandled exception {type(exc).__name__}: {sanitize_error_message(exc)}",
        exc_info=True,
    )
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        details,
    )


class ErrorHandlingMiddleware:
    """
    Outermost ASGI middleware turning anything that escapes the routes into
    the JSON error envelope.

    Args:
        app: The ASGI application
        debug: Include exception type and traceback in ``details``
    """

    def __init__(self, app: Callable, debug: bool = False):
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            status_code, code, message, details = classify_exception(exc, self.debug)
            headers = dict(scope.get("headers") or [])
            request_id = headers.get(b"x-request-id")
            response = JSONResponse(
                status_code=status_code,
                content=error_envelope(
                    code,
                    message,
                    scope.get("path", "unknown"),
                    scope.get("method", "unknown"),
                    details,
                    request_id.decode() if request_id else None,
                ),
            )
            await response(scope, receive, send)


def setup_error_handlers(app, debug: bool = False):
    """
    Register the envelope-producing exception handlers on a FastAPI app.

    Args:
        app: FastAPI application instance
        debug: Include exception details for unexpected errors
    """

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        status_code, code, message, details = classify_exception(exc, debug)
        return JSONResponse(
            status_code=status_code,
            content=error_envelope(
                code,
                message,
                str(request.url.path),
                request.method,
                details,
                getattr(request.state, "request_id", None),
            ),
        )

    for exc_class in (
        WorkflowError,
        StarletteHTTPException,
        RequestValidationError,
        SQLAlchemyError,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle)
