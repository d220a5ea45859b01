"""
Access Logging Middleware

Logs every API request with its method, path, status and duration, and tags
it with a request id for correlation with Sentry events.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.logging import get_logger

logger = get_logger(__name__)

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API access.

    Captures:
    - Request details (method, path, client IP)
    - Response status and duration
    - Request id, echoed back in the X-Request-ID header
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = 1.0):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            enabled: Whether logging is enabled
            slow_threshold: Seconds after which a request is logged as slow
        """
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.enabled or request.url.path in SKIPPED_PATHS:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        if duration >= self.slow_threshold:
            logger.slow(
                "Slow request",
                duration=round(duration, 3),
                threshold=self.slow_threshold,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                request_id=request_id,
            )
        else:
            logger.request(
                "API request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration=round(duration, 3),
                ip=self._get_client_ip(request),
                request_id=request_id,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks X-Forwarded-For first (proxied requests), then the direct
        client address.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
