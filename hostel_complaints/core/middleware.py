"""
Core middleware and exception handler registration for the FastAPI application.

Provides request tracking, timing and error logging middleware plus the
handlers that turn domain exceptions into the JSON response envelope.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostel_complaints.core.exceptions import BaseAppException, ErrorCode
from hostel_complaints.core.logging import get_logger, request_id as request_id_var

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each incoming request.

    The request ID is:
    - Stored in request.state.request_id and in the logging context
    - Added to response headers as X-Request-ID
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse an upstream request ID when a proxy already assigned one
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that measures and logs request processing time.

    Adds X-Process-Time header to responses with the processing duration in seconds.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            "Request completed",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "path": str(request.url.path),
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
                "client_host": request.client.host if request.client else None,
            }
        )

        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs error responses and unhandled exceptions.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request processing failed: {exc}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "path": str(request.url.path),
                    "error_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        if response.status_code >= 500:
            logger.warning(
                f"Request returned error status {response.status_code}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "path": str(request.url.path),
                    "status_code": response.status_code,
                }
            )

        return response


# ------------------------------------------------------------------ #
# Exception handlers
# ------------------------------------------------------------------ #
def error_envelope(message: str, code: str, details: Optional[dict] = None) -> dict:
    return {
        "success": False,
        "message": message,
        "data": None,
        "metadata": {"error_code": code, "details": details or {}},
    }


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Render a domain exception with its own status code"""
    if exc.status_code >= 500:
        logger.error(f"Unhandled application error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope("An internal error occurred", ErrorCode.INTERNAL_ERROR.value),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.error_code.value, exc.details),
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body/query validation failures with field-level detail"""
    field_errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "form")]
        field = ".".join(loc) or "request"
        field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope(
            "Validation failed",
            ErrorCode.VALIDATION_ERROR.value,
            {"field_errors": field_errors},
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


def register_middlewares(app: FastAPI) -> None:
    """
    Register all core middlewares to the FastAPI application.

    Middlewares are registered in reverse order of execution (LIFO).
    The last middleware added is the first one to process the request.

    Execution order:
        1. RequestIDMiddleware (sets the request ID first)
        2. ErrorLoggingMiddleware
        3. TimingMiddleware
    """
    app.add_middleware(TimingMiddleware)
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    logger.info(
        "Core middlewares registered",
        extra={
            "middlewares": [
                "RequestIDMiddleware",
                "ErrorLoggingMiddleware",
                "TimingMiddleware",
            ],
        }
    )


def get_request_id(request: Request) -> Optional[str]:
    """
    Retrieve the request ID from the current request.

    Args:
        request: The current FastAPI Request object

    Returns:
        The request ID string, or None if not available
    """
    return getattr(request.state, "request_id", None)


__all__ = [
    "RequestIDMiddleware",
    "TimingMiddleware",
    "ErrorLoggingMiddleware",
    "register_middlewares",
    "register_exception_handlers",
    "get_request_id",
    "error_envelope",
]
