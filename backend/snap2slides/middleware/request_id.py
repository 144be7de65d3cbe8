"""
Snap2Slides Backend: Request ID Middleware
============================================

What:  Assigns a correlation id to each request and echoes it in the response.
How:   Uses the client's X-Request-ID header when present, otherwise a short
       UUID. Stored in a ContextVar for loggers and exception handlers, and on
       request.state for route handlers.
Who:   Applied to every request via Starlette middleware.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client if sent
        2. Otherwise generate the first 8 chars of a UUID4
        3. Store in request_id_var and request.state.request_id
        4. Add the id to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
