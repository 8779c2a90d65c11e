"""Request logging middleware."""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status code and duration."""

    async def dispatch(self, request: Request, call_next):
        """Log request before processing and response after."""
        # Health checks are polled; keep them out of the log
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.time()
        logger.debug("Incoming request", method=request.method, path=request.url.path)

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response
