import re
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger("salon_store.requests")

_BOOKING_PATH_RE = re.compile(r"^/api/bookings/(\d+)$")


def request_log_fields(request: Request) -> dict:
    """Fields bound to every log line of a request to the store API."""
    path = request.url.path
    fields = {"method": request.method, "path": path}
    match = _BOOKING_PATH_RE.match(path)
    if match:
        fields["booking_id"] = int(match.group(1))
    day = request.query_params.get("day")
    if day:
        fields["day"] = day
    return fields


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request: ``request_finished``, ``request_rejected`` (4xx) or ``request_failed``."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, **request_log_fields(request))

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc), duration_ms=_elapsed_ms(started))
            raise

        response.headers["X-Request-ID"] = request_id
        if 400 <= response.status_code < 500:
            logger.warning("request_rejected", status=response.status_code, duration_ms=_elapsed_ms(started))
        else:
            logger.info("request_finished", status=response.status_code, duration_ms=_elapsed_ms(started))
        return response
