"""
Request logging middleware.
"""
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cms.core.config import settings
from cms.core.logging import set_correlation_id, get_logger

logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 1.0


class LoggingMiddleware(BaseHTTPMiddleware):
    """Stamps a correlation id on each request and logs its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        site_header = request.headers.get(settings.SITE_HEADER)

        await logger.ainfo(
            "HTTP request started",
            method=method,
            path=path,
            site=site_header,
            client_ip=self._get_client_ip(request)
        )

        try:
            response = await call_next(request)
        except Exception as e:
            await logger.aerror(
                "HTTP request failed",
                method=method,
                path=path,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__
            )
            raise

        duration = time.perf_counter() - start_time
        await logger.ainfo(
            "HTTP request completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )

        if duration > SLOW_REQUEST_SECONDS:
            await logger.awarning(
                "Slow HTTP request detected",
                method=method,
                path=path,
                duration_ms=round(duration * 1000, 2),
                status_code=response.status_code
            )

        response.headers["X-Correlation-ID"] = correlation_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request headers."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # Take the first IP in the chain
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
