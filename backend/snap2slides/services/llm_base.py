"""
Snap2Slides Backend: Abstract Provider Client Interfaces
==========================================================

What:  Abstract base classes for the two upstream AI providers.
How:   Concrete clients make exactly ONE call with the credential they are
       handed. Rotation, timeouts and health tracking belong to the
       EndpointPoolManager, which calls these interfaces.
Who:   Implemented by GeminiVisionClient and PerplexityResearchClient;
       tests substitute in-memory fakes.

Contract (both interfaces):
    - Return the provider's textual answer on success.
    - Raise ProviderError (or RateLimitedError when the provider clearly
      says so) with the provider's message and optional HTTP status.
    - Any other exception is treated by the manager as a generic failure.
"""

from abc import ABC, abstractmethod

from snap2slides.models.endpoint import Endpoint


class VisionClient(ABC):
    """Multimodal content extraction (image/document + prompt → text)."""

    @abstractmethod
    async def generate(
        self,
        endpoint: Endpoint,
        content: bytes,
        mime_type: str,
        prompt: str,
    ) -> str:
        """
        Send one binary payload and an instruction prompt to the provider.

        Args:
            endpoint:  Endpoint whose credential authorizes the call
            content:   Raw file bytes (already validated by the caller)
            mime_type: Declared MIME type of `content`
            prompt:    Free-text instruction

        Returns:
            The model's raw text response.
        """
        ...


class ResearchClient(ABC):
    """Text-only research completion used to enrich extracted content."""

    @abstractmethod
    async def complete(self, endpoint: Endpoint, query: str) -> str:
        """
        Ask the research provider for insights about `query`.

        Returns:
            The first choice's message content, or a placeholder when the
            provider returned no choices.
        """
        ...
