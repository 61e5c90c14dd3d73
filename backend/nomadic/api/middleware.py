"""
Request middleware for logging, timing, and request ID tracking.
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from nomadic.core.logging import get_logger

logger = get_logger(__name__)

# Stripe retries webhooks; its delivery id makes retries easy to correlate
_CORRELATION_HEADERS = ("x-request-id", "stripe-request-id")


def _incoming_request_id(request: Request) -> str:
    for header in _CORRELATION_HEADERS:
        value = request.headers.get(header)
        if value:
            return value[:64]
    return uuid.uuid4().hex[:12]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id/method/path to structlog contextvars for every log line
    emitted while handling the request, then logs status and duration.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _incoming_request_id(request)
        start_time = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error("request_failed", error=str(e), duration_ms=duration_ms)
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        log = logger.warning if response.status_code >= 400 else logger.info
        log("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response
