"""
Snap2Slides Backend: Perplexity Research Client
=================================================

What:  Concrete ResearchClient calling Perplexity's OpenAI-compatible
       chat completions endpoint over HTTP.
How:   One POST {base_url}/chat/completions with a bearer credential.
       The manager bounds the call with the endpoint timeout; httpx gets
       the same value as its transport timeout.
Who:   Called by EndpointPoolManager.get_insights_with_research_provider().

Request Body:
    {
        "model": "<perplexity_model>",
        "messages": [{"role": "system", ...}, {"role": "user", "content": query}],
        "max_tokens": 2000,
        "temperature": 0.2,
        "top_p": 0.9
    }
"""

import logging
from typing import Any, Dict, Optional

import httpx

from snap2slides.config import Settings
from snap2slides.exceptions import ProviderError
from snap2slides.models.endpoint import Endpoint
from snap2slides.services.llm_base import ResearchClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful research assistant. "
    "Provide detailed insights and analysis about the given topic."
)

NO_INSIGHTS_PLACEHOLDER = "No insights generated"


class PerplexityResearchClient(ResearchClient):
    """HTTP client for research insights."""

    def __init__(
        self,
        model: str,
        max_tokens: int = 2000,
        temperature: float = 0.2,
        top_p: float = 0.9,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        # Tests inject httpx.MockTransport here
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "PerplexityResearchClient":
        return cls(model=settings.perplexity_model)

    def build_payload(self, query: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": query},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
        }

    async def complete(self, endpoint: Endpoint, query: str) -> str:
        if not endpoint.base_url:
            raise ProviderError(message=f"Endpoint {endpoint.id} has no base URL configured")

        url = f"{endpoint.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {endpoint.credential}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(
            timeout=endpoint.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(url, headers=headers, json=self.build_payload(query))

        if not response.is_success:
            raise ProviderError(
                message=f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(message="Malformed JSON in research response") from e

        return extract_first_choice(data)


def extract_first_choice(data: Any) -> str:
    """
    Pull `choices[0].message.content` out of a completion body.

    Returns NO_INSIGHTS_PLACEHOLDER when any level is missing or empty.
    """
    if not isinstance(data, dict):
        return NO_INSIGHTS_PLACEHOLDER
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return NO_INSIGHTS_PLACEHOLDER
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content or NO_INSIGHTS_PLACEHOLDER
