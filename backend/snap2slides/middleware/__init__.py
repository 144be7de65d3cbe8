"""
Snap2Slides Backend: Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first, as registered in main.create_app):
    Request → [CORS] → [GZip] → [Rate Limit] → [Request ID] → [Logging] → Route

    Starlette runs the most recently added middleware first, so main.py adds
    them in the reverse of this order.

    - Rate Limit rejects over-quota clients before any other work
    - Request ID sets the correlation id before the access log line is written
    - Logging records status and duration once the route has returned
"""
