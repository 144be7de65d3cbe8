"""
Snap2Slides Backend: Request Logging Middleware
=================================================

What:  One access log line per HTTP request with status and duration.
How:   Times the downstream call and logs on the "snap2slides.access"
       logger, with structured fields passed as `extra`.
Who:   Applied to every request via Starlette middleware.
When:  Inside RequestIDMiddleware, so the correlation id is already set.

Log Line:
    POST /api/gemini-vision 200 3456.8ms [a1b2c3d4] from 192.168.1.100

What is NOT logged:
    Request bodies, uploaded file contents, query strings, auth headers and
    provider credentials.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snap2slides.middleware.request_id import request_id_var

logger = logging.getLogger("snap2slides.access")

# Probes hit these every few seconds
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration, request id and client IP.

    Level follows the status code: 5xx ERROR, 4xx WARNING, else INFO.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        rid = request_id_var.get("")

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
