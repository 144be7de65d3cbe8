"""
Snap2Slides Backend: Google Gemini Vision Client
==================================================

What:  Concrete VisionClient using the Google Gemini API for document and
       image content extraction.
How:   Configures the SDK with the endpoint's key, builds a GenerativeModel
       and sends prompt + inline image data in one generate_content call.
Who:   Called by EndpointPoolManager.analyze_with_vision_provider(), once per
       attempted endpoint.
When:  After upload validation, inside the manager's timeout bound.

Error Translation:
    ResourceExhausted (HTTP 429)  → RateLimitedError(status_code=429)
    Other GoogleAPICallError      → ProviderError(status_code=<code>)
    Empty / blocked response      → ProviderError
    Anything else                 → propagates; the manager counts it as a
                                    generic failure
"""

import logging
import time

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from snap2slides.config import Settings
from snap2slides.exceptions import ProviderError, RateLimitedError
from snap2slides.models.endpoint import Endpoint
from snap2slides.services.llm_base import VisionClient

logger = logging.getLogger(__name__)


class GeminiVisionClient(VisionClient):
    """
    Google Gemini implementation of the vision provider contract.

    Key handling:
        genai.configure() is process-global. generate() configures the key,
        builds the model and awaits generate_content_async() without yielding
        in between; the model binds its async client before its first await,
        so concurrent requests on other keys cannot swap the credential.
    """

    def __init__(self, model_name: str, max_output_tokens: int = 4096):
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiVisionClient":
        return cls(
            model_name=settings.gemini_model,
            max_output_tokens=settings.gemini_max_output_tokens,
        )

    def _build_model(self, api_key: str) -> "genai.GenerativeModel":
        genai.configure(api_key=api_key)
        return genai.GenerativeModel(
            self.model_name,
            generation_config={"max_output_tokens": self.max_output_tokens},
        )

    async def generate(
        self,
        endpoint: Endpoint,
        content: bytes,
        mime_type: str,
        prompt: str,
    ) -> str:
        start_time = time.time()
        model = self._build_model(endpoint.credential)

        try:
            response = await model.generate_content_async(
                [prompt, {"mime_type": mime_type, "data": content}],
                request_options={"timeout": endpoint.timeout_seconds},
            )
        except google_exceptions.ResourceExhausted as e:
            raise RateLimitedError(message=str(e.message or e), status_code=429) from e
        except google_exceptions.GoogleAPICallError as e:
            status = int(e.code) if e.code is not None else None
            raise ProviderError(message=str(e.message or e), status_code=status) from e

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or has no parts
            raise ProviderError(message=f"Gemini returned no text: {e}") from e

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "[%s] Gemini generation completed in %.0fms, %d chars",
            endpoint.id,
            duration_ms,
            len(text or ""),
        )
        return text or ""
