"""
Snap2Slides Backend: Settings Unit Tests

What we test:
    ✅ Credential slots skip empty and placeholder values
    ✅ Production validation reports a missing Gemini key
    ✅ log_level validation and CORS parsing
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from snap2slides.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "gemini_api_key_1": "",
        "gemini_api_key_2": "",
        "gemini_api_key_3": "",
        "perplexity_api_key": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestCredentials:

    def test_slots_keep_their_numbers(self):
        settings = _settings(gemini_api_key_2=" key-two ", gemini_api_key_3="key-three")
        assert settings.vision_credentials == [(2, "key-two"), (3, "key-three")]

    def test_placeholder_keys_ignored(self):
        settings = _settings(
            gemini_api_key_1="your_gemini_api_key_here",
            perplexity_api_key="your_perplexity_api_key_here",
        )
        assert settings.vision_credentials == []
        assert settings.research_credential == ""

    def test_missing_gemini_key_reported(self):
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            _settings().validate_required_for_production()

    def test_configured_gemini_key_passes(self):
        _settings(gemini_api_key_1="key").validate_required_for_production()


class TestServerSettings:

    def test_log_level_uppercased(self):
        assert _settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            _settings(log_level="LOUD")

    def test_cors_origins_list(self):
        settings = _settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_endpoint_policy_defaults(self):
        settings = _settings()
        assert settings.endpoint_error_threshold == 3
        assert settings.endpoint_recovery_seconds == 300
        assert settings.endpoint_timeout_ms == 30_000
        assert settings.endpoint_max_retries == 2
