"""
Request logging middleware.

Logs tool-call and health requests with timing information.
"""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

# Health checks hit these every few seconds; keep them out of INFO output
QUIET_PATHS = {"/health", "/health/live", "/health/ready"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Logs method, path, status code and processing time. Health-check paths are
    logged at DEBUG level.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and log details."""
        path = request.url.path
        level = logging.DEBUG if path in QUIET_PATHS else logging.INFO
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {request.method} {path} - {e}")
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.log(
            level,
            f"{request.method} {path} status={response.status_code} "
            f"time={process_time:.4f}s",
        )
        return response
