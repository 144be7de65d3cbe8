"""
Snap2Slides Backend: Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a default `settings` object.
       The app factory accepts an explicit Settings for tests.
Who:   Read by the app factory, the endpoint pool manager and the upload
       validation layer.
When:  Loaded once at startup; immutable for the process lifetime.

Credential Layout:
    GEMINI_API_KEY_1 .. GEMINI_API_KEY_3  → vision pool (gemini_1 .. gemini_3)
    PERPLEXITY_API_KEY                     → research pool (perplexity_1)

    Empty or missing keys are skipped. The endpoint id keeps the slot number
    of the environment variable, so GEMINI_API_KEY_2 alone yields `gemini_2`.
"""

from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


# Placeholder values shipped in .env.example; treated as "not configured"
_PLACEHOLDER_KEYS = {"", "your_gemini_api_key_here", "your_perplexity_api_key_here"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development. Production
    deployments MUST provide at least one Gemini key.

    Attributes are grouped by concern for readability.
    """

    # ── Google Gemini (vision pool) ───────────────────────────────────────
    # What: Up to three API keys rotated round-robin by the endpoint manager
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key_1: str = Field(default="", description="First Gemini API key")
    gemini_api_key_2: str = Field(default="", description="Second Gemini API key")
    gemini_api_key_3: str = Field(default="", description="Third Gemini API key")

    gemini_model: str = Field(default="models/gemini-2.0-flash")
    gemini_max_output_tokens: int = Field(default=4096, ge=256, le=32768)

    # ── Perplexity (research pool) ────────────────────────────────────────
    perplexity_api_key: str = Field(
        default="",
        description="Perplexity API key for research insights (optional)",
    )
    perplexity_base_url: str = Field(default="https://api.perplexity.ai")
    perplexity_model: str = Field(default="llama-3.1-sonar-large-128k-online")

    # ── Endpoint Health Policy ────────────────────────────────────────────
    # What: Per-endpoint constants copied into each Endpoint at construction
    endpoint_max_retries: int = Field(default=2, ge=0, le=10)
    endpoint_timeout_ms: int = Field(default=30_000, ge=1_000, le=300_000)

    # What: Consecutive failures before an endpoint is taken out of rotation
    endpoint_error_threshold: int = Field(default=3, ge=1, le=20)

    # What: Seconds since the last failure after which a disabled endpoint
    # is put back into rotation on the next selection
    endpoint_recovery_seconds: int = Field(default=300, ge=1, le=86_400)

    # What: Horizon stamped on `rate_limit_reset_at` after a quota error
    rate_limit_cooldown_seconds: int = Field(default=3600, ge=60, le=86_400)

    # ── Uploads ───────────────────────────────────────────────────────────
    # Default: 50MB = 50 * 1024 * 1024
    max_file_size: int = Field(default=52_428_800, ge=1_048_576, le=104_857_600)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # What: Per-IP sliding window rate limit on the HTTP surface
    rate_limit_requests: int = Field(default=100, ge=10, le=10000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def vision_credentials(self) -> List[Tuple[int, str]]:
        """
        Configured Gemini keys as (slot, key) pairs, skipping empty slots.

        Slot numbers are 1-based and match the GEMINI_API_KEY_<n> suffix.
        """
        keys = [self.gemini_api_key_1, self.gemini_api_key_2, self.gemini_api_key_3]
        return [
            (slot, key.strip())
            for slot, key in enumerate(keys, start=1)
            if key and key.strip() not in _PLACEHOLDER_KEYS
        ]

    @property
    def research_credential(self) -> str:
        """Perplexity key, or an empty string when not configured."""
        key = self.perplexity_api_key.strip()
        return "" if key in _PLACEHOLDER_KEYS else key

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError with guidance.
        """
        errors = []
        if not self.vision_credentials:
            errors.append(
                "No GEMINI_API_KEY_1..3 is set. "
                "Get a free key at https://aistudio.google.com/app/apikey"
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Default instance used when the app factory is not handed explicit settings
settings = Settings()
