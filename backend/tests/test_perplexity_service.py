"""
Snap2Slides Backend: Perplexity Research Client Unit Tests
============================================================

What:  Tests for PerplexityResearchClient over httpx.MockTransport.

What we test:
    ✅ Request shape: URL, bearer header, JSON body
    ✅ First choice content is returned
    ✅ Missing choices give the placeholder text
    ✅ Non-2xx responses become ProviderError("HTTP <code>: <reason>")
    ✅ Malformed JSON becomes ProviderError
"""

import json

import httpx
import pytest

from conftest import research_endpoint
from snap2slides.exceptions import ProviderError
from snap2slides.services.perplexity_service import (
    NO_INSIGHTS_PLACEHOLDER,
    PerplexityResearchClient,
    extract_first_choice,
)


def _client(handler) -> PerplexityResearchClient:
    return PerplexityResearchClient(
        model="llama-3.1-sonar-large-128k-online",
        transport=httpx.MockTransport(handler),
    )


class TestPerplexityResearchClient:

    @pytest.mark.asyncio
    async def test_request_shape_and_answer(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Insight"}}]})

        result = await _client(handler).complete(research_endpoint(), "market size")

        assert result == "Insight"
        assert seen["url"] == "https://research.test/chat/completions"
        assert seen["auth"] == "Bearer secret-perplexity_1"
        body = seen["body"]
        assert body["model"] == "llama-3.1-sonar-large-128k-online"
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][1] == {"role": "user", "content": "market size"}
        assert body["max_tokens"] == 2000
        assert body["temperature"] == 0.2
        assert body["top_p"] == 0.9

    @pytest.mark.asyncio
    async def test_empty_choices_gives_placeholder(self):
        client = _client(lambda request: httpx.Response(200, json={"choices": []}))
        assert await client.complete(research_endpoint(), "q") == NO_INSIGHTS_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = _client(lambda request: httpx.Response(401))

        with pytest.raises(ProviderError) as exc_info:
            await client.complete(research_endpoint(), "q")

        assert exc_info.value.message == "HTTP 401: Unauthorized"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(ProviderError, match="Malformed JSON"):
            await client.complete(research_endpoint(), "q")

    @pytest.mark.asyncio
    async def test_missing_base_url(self):
        endpoint = research_endpoint()
        endpoint.base_url = None
        client = _client(lambda request: httpx.Response(200))

        with pytest.raises(ProviderError, match="no base URL"):
            await client.complete(endpoint, "q")


class TestExtractFirstChoice:

    @pytest.mark.parametrize(
        "data",
        [None, [], {}, {"choices": None}, {"choices": [{}]}, {"choices": [{"message": {"content": ""}}]}],
    )
    def test_placeholder_for_missing_levels(self, data):
        assert extract_first_choice(data) == NO_INSIGHTS_PLACEHOLDER

    def test_first_choice_wins(self):
        data = {"choices": [{"message": {"content": "one"}}, {"message": {"content": "two"}}]}
        assert extract_first_choice(data) == "one"
