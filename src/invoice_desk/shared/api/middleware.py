"""
Shared API Middleware
======================

Common middleware for the FastAPI application.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from invoice_desk.core import (
    ApiError,
    ApiTimeoutError,
    ApplicationException,
    AuthenticationError,
    NotFoundError,
    SnapshotParseError,
    ValidationError,
    ValidationException,
)
from invoice_desk.shared.infrastructure.logging import correlation_id_var, get_context_logger, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    The id is also forwarded to the invoicing API so upstream logs can be
    joined with ours.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER, str(uuid.uuid4()))

        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs all requests and responses.

    Provides audit trail and debugging information.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Returns consistent error responses for all exceptions.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    get_context_logger(__name__, correlation_id).error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    # Don't expose internal details in production
    settings = getattr(request.app.state, "settings", None)
    is_dev = getattr(settings, "environment", None) == "development"

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None
        }
    )


def _status_for(exc: ApplicationException) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, ApiTimeoutError):
        return 504
    if isinstance(exc, ApiError):
        return 403 if exc.status_code == 403 else 502
    if isinstance(exc, SnapshotParseError):
        # The invoicing API sent a workflow we cannot read
        return 502
    if isinstance(exc, ValidationException):
        return 422
    return 500


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Map typed application errors to HTTP responses.

    Upstream validation messages are passed through so the client can show
    them next to the transition form.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    status_code = _status_for(exc)

    get_context_logger(__name__, correlation_id).warning(
        "Request rejected",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
            "status_code": status_code
        }
    )

    content = {
        "detail": getattr(exc, "reason", exc.message),
        "error_type": type(exc).__name__,
        "correlation_id": correlation_id,
    }
    if isinstance(exc, ValidationError):
        content["errors"] = exc.messages
    elif isinstance(exc, ValidationException):
        content["errors"] = exc.details

    return JSONResponse(status_code=status_code, content=content)
