import time

from starlette.middleware.base import BaseHTTPMiddleware

from ...logging import get_logger

logger = get_logger("clinic.http")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        resp = await call_next(request)
        logger.info(
            {
                "event": "http_request",
                "method": request.method,
                "path": request.url.path,
                "status": resp.status_code,
                "ms": round((time.perf_counter() - started) * 1000, 1),
            }
        )
        return resp
