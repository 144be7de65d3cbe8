"""
Snap2Slides Backend: Endpoint Pool Manager
============================================

What:  Owns every configured provider endpoint and serves one healthy
       endpoint per request, with failover across the Gemini key pool.
How:   Two pools (vision, research). The vision pool is rotated
       round-robin; the research pool has at most one endpoint. Every call
       is bounded by the endpoint's timeout, failures are classified and
       counted, and endpoints are disabled at the error threshold and
       lazily re-enabled after the recovery window.
Who:   Built once by the app factory and stored on app.state; reached from
       routes through dependencies.get_endpoint_manager().
When:  On every upload (vision + research) and on admin status/reset calls.

Selection Algorithm (vision pool):
    healthy = [e for e in vision_pool after lazy recovery if e.is_healthy]
    start   = cursor % len(healthy)
    try healthy[start], healthy[start + 1], ... (each at most once)
    on success: cursor = (served_index + 1) % len(healthy)

    The cursor is only meaningful modulo the healthy subset computed for
    the current call; it is never used as an index into the full pool.

Failure Handling:
    Every failure increments the endpoint's counter and stamps the time.
    Rate-limit failures (classify_error) also stamp rate_limit_reset_at one
    cooldown ahead. That field is bookkeeping only and does not gate
    selection. No exception leaves the public operations: callers get a
    ProviderResult with success=False and a readable reason.

Concurrency:
    Single asyncio process, no locks. Counter updates happen between awaits
    so they are never torn, but concurrent failures on the same endpoint
    may each see the pre-update state.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from snap2slides.config import Settings
from snap2slides.exceptions import (
    NoAvailableEndpointsError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitedError,
)
from snap2slides.models.endpoint import Endpoint, ProviderType
from snap2slides.schemas.status import EndpointStatus
from snap2slides.services.llm_base import ResearchClient, VisionClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_VISION_ENDPOINTS = "No available Gemini APIs. All APIs are temporarily disabled."
NO_RESEARCH_ENDPOINTS = "No available Perplexity APIs"

# Substrings that mark a provider message as a quota / rate-limit rejection
RATE_LIMIT_TOKENS = ("quota", "limit")


@dataclass
class ProviderResult:
    """
    Uniform outcome of a manager operation.

    success=True  → `data` holds the provider text, `api_used` the endpoint id
    success=False → `error` holds a human-readable reason
    """

    success: bool
    data: Optional[str] = None
    error: Optional[str] = None
    api_used: Optional[str] = None


def classify_error(error: BaseException) -> ProviderError:
    """
    Normalize any failure from a provider call into the provider taxonomy.

    Rules:
        TimeoutError / ProviderTimeoutError     → ProviderTimeoutError
        RateLimitedError                        → unchanged
        message contains "quota" or "limit", or
        status_code == 429                      → RateLimitedError
        other ProviderError                     → unchanged
        anything else                           → ProviderError(str(error))

    This is the only place the rate-limit heuristic lives; swap it for
    structured provider codes here.
    """
    if isinstance(error, (ProviderTimeoutError, RateLimitedError)):
        return error
    if isinstance(error, TimeoutError):
        return ProviderTimeoutError()

    message = str(getattr(error, "message", None) or error) or type(error).__name__
    status_code = getattr(error, "status_code", None)
    if status_code is None:
        status_code = getattr(error, "status", None)
    if not isinstance(status_code, int):
        status_code = None

    lowered = message.lower()
    if status_code == 429 or any(token in lowered for token in RATE_LIMIT_TOKENS):
        return RateLimitedError(message=message, status_code=status_code)
    if isinstance(error, ProviderError):
        return error
    return ProviderError(message=message, status_code=status_code)


class EndpointPoolManager:
    """
    Credential rotation and failover for the vision and research providers.

    Args:
        endpoints:            Fixed endpoint set (never changes afterwards)
        vision_client:        Performs one Gemini call for an endpoint
        research_client:      Performs one Perplexity call for an endpoint
        error_threshold:      Consecutive failures that disable an endpoint
        recovery_window:      Age of the last failure after which a disabled
                              endpoint rejoins the rotation
        rate_limit_cooldown:  Horizon stamped into rate_limit_reset_at
        clock:                Returns an aware "now"; injectable for tests
    """

    def __init__(
        self,
        endpoints: Sequence[Endpoint],
        vision_client: VisionClient,
        research_client: ResearchClient,
        error_threshold: int = 3,
        recovery_window: timedelta = timedelta(minutes=5),
        rate_limit_cooldown: timedelta = timedelta(hours=1),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        ids = [e.id for e in endpoints]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate endpoint ids: {ids}")

        self._endpoints: List[Endpoint] = list(endpoints)
        self._by_id: Dict[str, Endpoint] = {e.id: e for e in self._endpoints}
        self.vision_client = vision_client
        self.research_client = research_client
        self.error_threshold = error_threshold
        self.recovery_window = recovery_window
        self.rate_limit_cooldown = rate_limit_cooldown
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._vision_cursor = 0

        logger.info(
            "Initialized %d APIs: %s",
            len(self._endpoints),
            [f"{e.id} ({e.provider_type.value})" for e in self._endpoints],
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        vision_client: VisionClient,
        research_client: ResearchClient,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "EndpointPoolManager":
        """
        Build the endpoint set from configuration.

        One vision endpoint per configured GEMINI_API_KEY_<n> (id gemini_<n>)
        and one research endpoint when PERPLEXITY_API_KEY is set.
        """
        endpoints: List[Endpoint] = [
            Endpoint(
                id=f"gemini_{slot}",
                provider_type=ProviderType.VISION,
                credential=key,
                max_retries=settings.endpoint_max_retries,
                timeout_ms=settings.endpoint_timeout_ms,
            )
            for slot, key in settings.vision_credentials
        ]
        if settings.research_credential:
            endpoints.append(
                Endpoint(
                    id="perplexity_1",
                    provider_type=ProviderType.RESEARCH,
                    credential=settings.research_credential,
                    base_url=settings.perplexity_base_url,
                    max_retries=settings.endpoint_max_retries,
                    timeout_ms=settings.endpoint_timeout_ms,
                )
            )

        return cls(
            endpoints=endpoints,
            vision_client=vision_client,
            research_client=research_client,
            error_threshold=settings.endpoint_error_threshold,
            recovery_window=timedelta(seconds=settings.endpoint_recovery_seconds),
            rate_limit_cooldown=timedelta(seconds=settings.rate_limit_cooldown_seconds),
            clock=clock,
        )

    # ── Introspection ─────────────────────────────────────────────────────

    @property
    def endpoints(self) -> List[Endpoint]:
        return list(self._endpoints)

    @property
    def vision_cursor(self) -> int:
        return self._vision_cursor

    def get_endpoint(self, endpoint_id: str) -> Optional[Endpoint]:
        return self._by_id.get(endpoint_id)

    # ── Health bookkeeping ────────────────────────────────────────────────

    def _healthy_pool(self, provider_type: ProviderType) -> List[Endpoint]:
        """
        Healthy subset of one pool, in configuration order.

        Lazily recovers any endpoint of the pool whose last failure is older
        than the recovery window before filtering.
        """
        now = self._clock()
        pool = [e for e in self._endpoints if e.provider_type == provider_type]
        for endpoint in pool:
            if endpoint.recovery_due(now, self.recovery_window):
                was_healthy = endpoint.is_healthy
                endpoint.recover()
                if not was_healthy:
                    logger.info("API %s re-enabled after recovery window", endpoint.id)
        return [e for e in pool if e.is_healthy]

    def _require_healthy(self, provider_type: ProviderType, message: str) -> List[Endpoint]:
        healthy = self._healthy_pool(provider_type)
        if not healthy:
            raise NoAvailableEndpointsError(
                message=message, context={"provider": provider_type.value}
            )
        return healthy

    def _record_failure(self, endpoint: Endpoint, error: ProviderError) -> None:
        now = self._clock()
        reset_at = None
        message = error.message
        if isinstance(error, RateLimitedError):
            reset_at = now + self.rate_limit_cooldown
            message = f"Rate limit: {error.message}"

        disabled = endpoint.record_failure(
            message=message,
            now=now,
            threshold=self.error_threshold,
            rate_limit_reset_at=reset_at,
        )
        if disabled:
            logger.warning(
                "API %s temporarily disabled due to errors: %s", endpoint.id, message
            )

    async def _attempt(
        self, endpoint: Endpoint, call: Callable[[], Awaitable[T]]
    ) -> T:
        """
        Run one provider call against `endpoint` under its timeout.

        asyncio.timeout cancels the in-flight call when the bound is hit.
        On any failure the endpoint's health is updated and the classified
        ProviderError is raised.
        """
        try:
            async with asyncio.timeout(endpoint.timeout_seconds):
                return await call()
        except TimeoutError as e:
            error: ProviderError = ProviderTimeoutError(timeout_ms=endpoint.timeout_ms)
            logger.error("Error with %s: %s", endpoint.id, error.message)
            self._record_failure(endpoint, error)
            raise error from e
        except Exception as e:
            error = classify_error(e)
            logger.error("Error with %s: %s", endpoint.id, error.message)
            self._record_failure(endpoint, error)
            if error is e:
                raise
            raise error from e

    # ── Public operations ─────────────────────────────────────────────────

    async def analyze_with_vision_provider(
        self, content: bytes, mime_type: str, prompt: str
    ) -> ProviderResult:
        """
        Extract content with the first healthy Gemini endpoint that succeeds.

        Attempts each healthy endpoint at most once, starting at the
        rotation cursor.

        Returns:
            ProviderResult; on failure the error embeds the last endpoint's
            message ("All Gemini APIs failed. Last error: ...").
        """
        try:
            healthy = self._require_healthy(ProviderType.VISION, NO_VISION_ENDPOINTS)
        except NoAvailableEndpointsError as e:
            logger.warning("Vision request rejected: %s", e.message)
            return ProviderResult(success=False, error=e.message)

        pool_size = len(healthy)
        start = self._vision_cursor % pool_size
        served_index = start
        text = ""

        retrying = AsyncRetrying(
            stop=stop_after_attempt(pool_size),
            retry=retry_if_exception_type(ProviderError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    served_index = (start + attempt.retry_state.attempt_number - 1) % pool_size
                    endpoint = healthy[served_index]
                    logger.info("Attempting image analysis with %s...", endpoint.id)
                    text = await self._attempt(
                        endpoint,
                        lambda: self.vision_client.generate(endpoint, content, mime_type, prompt),
                    )
        except ProviderError as e:
            return ProviderResult(
                success=False,
                error=f"All Gemini APIs failed. Last error: {e.message}",
            )

        self._vision_cursor = (served_index + 1) % pool_size
        return ProviderResult(success=True, data=text, api_used=healthy[served_index].id)

    async def get_insights_with_research_provider(self, query: str) -> ProviderResult:
        """
        Ask the (single) research endpoint for insights about `query`.

        No rotation: the first healthy research endpoint is used.
        """
        try:
            endpoint = self._require_healthy(ProviderType.RESEARCH, NO_RESEARCH_ENDPOINTS)[0]
        except NoAvailableEndpointsError as e:
            return ProviderResult(success=False, error=e.message)

        logger.info("Getting insights with %s...", endpoint.id)
        try:
            text = await self._attempt(
                endpoint, lambda: self.research_client.complete(endpoint, query)
            )
        except ProviderError as e:
            return ProviderResult(success=False, error=e.message)

        return ProviderResult(success=True, data=text, api_used=endpoint.id)

    def get_status_snapshot(self) -> List[EndpointStatus]:
        """Health of every configured endpoint. Read-only; no lazy recovery."""
        return [
            EndpointStatus(
                id=e.id,
                type=e.provider_type.value,
                is_healthy=e.is_healthy,
                error_count=e.consecutive_error_count,
                last_error=e.last_error,
                last_error_at=e.last_error_at,
                rate_limit_reset_at=e.rate_limit_reset_at,
                max_retries=e.max_retries,
                timeout_ms=e.timeout_ms,
            )
            for e in self._endpoints
        ]

    def reset_endpoint(self, endpoint_id: str) -> None:
        """Re-enable an endpoint and clear its counters. Unknown ids are ignored."""
        endpoint = self._by_id.get(endpoint_id)
        if endpoint is None:
            logger.debug("Reset requested for unknown API %s; ignoring", endpoint_id)
            return
        endpoint.reset()
        logger.info("Manually reset API: %s", endpoint_id)
