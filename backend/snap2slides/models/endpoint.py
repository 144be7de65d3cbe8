"""
Snap2Slides Backend: Provider Endpoint Model
==============================================

What:  Mutable record for one configured provider credential and its health.
How:   Plain dataclass; the EndpointPoolManager owns every instance and is
       the only writer.
Who:   Created by EndpointPoolManager.from_settings() at startup.
When:  Lives for the process lifetime. Never destroyed, only toggled
       healthy/unhealthy with counters mutated.

State Machine:
    HEALTHY
        → On failure: consecutive_error_count += 1, last_error_at = now
        → When consecutive_error_count reaches the threshold: UNHEALTHY
    UNHEALTHY (excluded from selection)
        → On selection, if now - last_error_at > recovery window: HEALTHY
          with counters cleared
        → On manual reset: HEALTHY with counters cleared

    A success does NOT clear the counter. Only recovery and reset do.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional


class ProviderType(str, enum.Enum):
    """Which pool an endpoint belongs to (and which call shape it uses)."""

    VISION = "gemini"
    RESEARCH = "perplexity"


@dataclass
class Endpoint:
    """
    One credential + provider pairing with its own health state.

    Attributes:
        id:             Stable identifier, e.g. "gemini_2" or "perplexity_1"
        provider_type:  Vision (Gemini) or research (Perplexity)
        credential:     API key. Excluded from repr; never logged or exposed.
        base_url:       HTTP root for providers called without an SDK
        max_retries:    Configured per-endpoint policy constant
        timeout_ms:     Upper bound for one call against this endpoint
    """

    id: str
    provider_type: ProviderType
    credential: str = field(repr=False)
    base_url: Optional[str] = None
    max_retries: int = 2
    timeout_ms: int = 30_000

    is_healthy: bool = True
    consecutive_error_count: int = 0
    last_error_at: Optional[datetime] = None
    last_error: Optional[str] = None
    rate_limit_reset_at: Optional[datetime] = None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def record_failure(
        self,
        message: str,
        now: datetime,
        threshold: int,
        rate_limit_reset_at: Optional[datetime] = None,
    ) -> bool:
        """
        Count one failed call against this endpoint.

        Args:
            message:             Error text kept for the status snapshot
            now:                 Failure timestamp
            threshold:           Count at which the endpoint is disabled
            rate_limit_reset_at: Set only for rate-limit failures

        Returns:
            True if this failure disabled the endpoint.
        """
        self.consecutive_error_count += 1
        self.last_error_at = now
        self.last_error = message
        if rate_limit_reset_at is not None:
            self.rate_limit_reset_at = rate_limit_reset_at

        if self.is_healthy and self.consecutive_error_count >= threshold:
            self.is_healthy = False
            return True
        return False

    def recovery_due(self, now: datetime, window: timedelta) -> bool:
        """True when the last failure is older than the recovery window."""
        return self.last_error_at is not None and now - self.last_error_at > window

    def recover(self) -> None:
        """Lazy recovery: clear the error counter and rejoin the rotation."""
        self.consecutive_error_count = 0
        self.is_healthy = True
        self.last_error_at = None
        self.last_error = None

    def reset(self) -> None:
        """Manual reset: recovery plus the rate-limit bookkeeping."""
        self.recover()
        self.rate_limit_reset_at = None
