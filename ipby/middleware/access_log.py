# Access Log Middleware
"""
FastAPI middleware that logs every request once it has been answered.

Logs method, path, status code and handling time in milliseconds.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Middleware that writes one access-log line per request.
    """

    def __init__(self, app: ASGIApp, logger_name: str = None):
        """
        Initialize access log middleware.

        Args:
            app: ASGI application
            logger_name: Logger to write to (defaults to this module's logger)
        """
        super().__init__(app)
        self.logger = logging.getLogger(logger_name) if logger_name else logger

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Time the downstream handler and log the result.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            The downstream response, unchanged
        """
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        self.logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
