"""
Snap2Slides Backend: Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for request handling and for the
       upstream AI providers.
How:   Each exception carries a message and optional context dict.
       HTTP-facing errors are caught by global handlers (registered in
       main.py). Provider errors never leave the endpoint pool manager: it
       converts them to a failed ProviderResult.
Who:   Raised by services, routes and provider clients.

Exception Hierarchy:
    Snap2SlidesError (base)
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── NotFoundError              → 404 Not Found
    ├── ServiceUnavailableError    → 503 Service Unavailable
    └── ProviderError              (upstream call failed; internal only)
        ├── RateLimitedError       (quota / 429 signal)
        ├── ProviderTimeoutError   (call exceeded its time bound)
        └── NoAvailableEndpointsError (pool empty or fully degraded)
"""

from typing import Any, Dict, Optional


class Snap2SlidesError(Exception):
    """
    Base exception for all Snap2Slides application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(Snap2SlidesError):
    """
    Raised when client input fails validation.

    When:    Unsupported file type, empty or oversized upload, missing ids.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(Snap2SlidesError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT /api/slides?id=... with an unknown id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ServiceUnavailableError(Snap2SlidesError):
    """
    Raised when an AI provider pool could not serve a request that has no
    offline fallback (e.g. the multi-file analyze route).

    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "AI analysis service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


# ══════════════════════════════════════════════════════════════════════════
# Provider Taxonomy (internal to the endpoint pool manager)
# ══════════════════════════════════════════════════════════════════════════


class ProviderError(Snap2SlidesError):
    """
    A single upstream call failed (HTTP error, malformed response, SDK error).

    Attributes:
        status_code: HTTP status reported by the provider, when known.
    """

    def __init__(
        self,
        message: str = "Provider call failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class RateLimitedError(ProviderError):
    """A ProviderError classified as a quota / rate-limit rejection."""


class ProviderTimeoutError(ProviderError):
    """The provider call did not settle within the endpoint's timeout."""

    def __init__(
        self,
        timeout_ms: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if timeout_ms is not None:
            ctx["timeout_ms"] = timeout_ms
        super().__init__(message="Request timeout", context=ctx)
        self.timeout_ms = timeout_ms


class NoAvailableEndpointsError(ProviderError):
    """The provider pool is empty or every endpoint is disabled."""
