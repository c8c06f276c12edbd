import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from boarddoc.common.logging import get_logger
from boarddoc.config import settings

logger = get_logger("middleware")

# Polled by load balancers; kept out of INFO logs
QUIET_PATHS = frozenset({"/health"})


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and expose it as a header.

    Generation fetches every list and comment thread one call at a time, so
    requests slower than ``SLOW_REQUEST_MS`` are logged as warnings.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if duration_ms >= settings.SLOW_REQUEST_MS:
            level = logging.WARNING
        elif request.url.path in QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO
        logger.log(
            level,
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )

        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response
