"""
Request logging middleware.

Logs every premium API request with its status and duration, and tags
the response with timing and request id headers.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

HEALTH_CHECK_PATHS = {"/health", "/health/ping", "/health/live", "/health/ready"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing information."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        logger_instance: logging.Logger | None = None,
        skip_paths: set[str] | None = None,
    ) -> None:
        """
        Initialize the logging middleware.

        Args:
            app: ASGI application
            logger_instance: Custom logger instance
            skip_paths: Paths to leave unlogged, defaults to the health checks
        """
        super().__init__(app)
        self._logger = logger_instance or logger
        self._skip_paths = HEALTH_CHECK_PATHS if skip_paths is None else skip_paths

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in self._skip_paths:
            return await call_next(request)

        start_time = time.time()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        fields = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
            "request_id": request_id,
        }

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._logger.error(
                f"{request.method} {request.url.path} failed",
                extra={
                    "event": "request_failed",
                    **fields,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        self._logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "event": "request_completed",
                **fields,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"
        response.headers["X-Request-ID"] = request_id
        return response
