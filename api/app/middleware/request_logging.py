# api/app/middleware/request_logging.py
"""
Access log for the management API. Health probes are not logged.
"""
from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 500
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.log(
            logging.WARNING if elapsed_ms >= SLOW_REQUEST_MS else logging.INFO,
            "%s %s → %d (%.0fms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response
