"""
Snap2Slides Backend: Rate Limiting Middleware
===============================================

What:  Per-IP sliding window limit on the HTTP surface.
How:   Keeps each client's request timestamps in memory, drops the ones
       older than the window and rejects with 429 once the limit is reached.
Who:   Applied to every request via Starlette middleware.

This protects the shared Gemini quota from a single noisy client. It is
separate from provider-side rate limits, which the endpoint pool manager
tracks per key.

Algorithm: Sliding Window Log
    1. Drop timestamps older than now - window
    2. If remaining count >= limit → 429 with Retry-After
    3. Otherwise record now and pass through

Caveats:
    State is per process. Behind a proxy the client IP is the proxy's
    unless the server is started with forwarded-header support.
"""

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Housekeeping interval, in recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        max_requests:    Requests allowed per client per window
        window_seconds:  Window length
        clock:           Returns epoch seconds; injectable for tests

    Excluded paths:
        /health and the API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.time
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        window_start = now - self.window_seconds

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": (
                        f"Too many requests. Please wait {retry_after} seconds before retrying."
                    ),
                    "details": {"retry_after": retry_after},
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget clients with no request inside the current window."""
        inactive = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive))
