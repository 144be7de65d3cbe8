"""
Snap2Slides Backend: Gemini Vision Client Unit Tests (Mocked)
===============================================================

What:  Tests for GeminiVisionClient with the Google Generative AI SDK patched.
How:   Patches the genai module so no real API calls are made.

What we test:
    ✅ Successful call returns the response text
    ✅ The endpoint's key and the model settings reach the SDK
    ✅ Prompt and inline data are sent together
    ✅ ResourceExhausted becomes RateLimitedError(429)
    ✅ Other API errors keep their status code
    ✅ Blocked / empty responses become ProviderError
    ❌ Real API calls (use integration tests for that)
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from conftest import vision_endpoint
from snap2slides.exceptions import ProviderError, RateLimitedError
from snap2slides.services.gemini_service import GeminiVisionClient


def _mock_model(response=None, side_effect=None):
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=response, side_effect=side_effect)
    return model


class TestGeminiVisionClientMocked:

    def setup_method(self):
        self.client = GeminiVisionClient(model_name="models/gemini-2.0-flash", max_output_tokens=4096)
        self.endpoint = vision_endpoint("gemini_2", timeout_ms=15_000)

    @pytest.mark.asyncio
    async def test_generate_success(self):
        response = MagicMock()
        response.text = "DOCUMENT TYPE: Invoice"
        with patch("snap2slides.services.gemini_service.genai") as mock_genai:
            model = _mock_model(response=response)
            mock_genai.GenerativeModel.return_value = model

            result = await self.client.generate(self.endpoint, b"bytes", "image/png", "prompt")

        assert result == "DOCUMENT TYPE: Invoice"
        mock_genai.configure.assert_called_once_with(api_key="secret-gemini_2")
        mock_genai.GenerativeModel.assert_called_once_with(
            "models/gemini-2.0-flash",
            generation_config={"max_output_tokens": 4096},
        )
        args, kwargs = model.generate_content_async.call_args
        assert args[0] == ["prompt", {"mime_type": "image/png", "data": b"bytes"}]
        assert kwargs["request_options"] == {"timeout": 15.0}

    @pytest.mark.asyncio
    async def test_resource_exhausted_is_rate_limited(self):
        with patch("snap2slides.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model(
                side_effect=google_exceptions.ResourceExhausted("Quota exceeded for metric")
            )

            with pytest.raises(RateLimitedError) as exc_info:
                await self.client.generate(self.endpoint, b"bytes", "image/png", "prompt")

        assert exc_info.value.status_code == 429
        assert "Quota exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_api_error_keeps_status(self):
        with patch("snap2slides.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model(
                side_effect=google_exceptions.InternalServerError("backend exploded")
            )

            with pytest.raises(ProviderError) as exc_info:
                await self.client.generate(self.endpoint, b"bytes", "image/png", "prompt")

        assert not isinstance(exc_info.value, RateLimitedError)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_blocked_response(self):
        response = MagicMock()
        type(response).text = PropertyMock(side_effect=ValueError("no parts"))
        with patch("snap2slides.services.gemini_service.genai") as mock_genai:
            mock_genai.GenerativeModel.return_value = _mock_model(response=response)

            with pytest.raises(ProviderError, match="Gemini returned no text"):
                await self.client.generate(self.endpoint, b"bytes", "image/png", "prompt")

    def test_from_settings(self, app_settings):
        client = GeminiVisionClient.from_settings(app_settings)
        assert client.model_name == app_settings.gemini_model
        assert client.max_output_tokens == app_settings.gemini_max_output_tokens
