"""
Snap2Slides Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── clock:            Controllable "now" for the endpoint manager
    ├── vision_client:    Scripted in-memory VisionClient
    ├── research_client:  Scripted in-memory ResearchClient
    ├── make_manager:     Builds an EndpointPoolManager over fake clients
    ├── app_settings:     Settings with two Gemini keys and one Perplexity key
    ├── sample_image_bytes
    └── test_client:      HTTPX AsyncClient against an app using the fakes

No fixture makes a network call.
"""

import asyncio
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Sequence, Union

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["GEMINI_API_KEY_1"] = "test-key-not-real"
os.environ["GEMINI_API_KEY_2"] = ""
os.environ["GEMINI_API_KEY_3"] = ""
os.environ["PERPLEXITY_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from snap2slides.config import Settings  # noqa: E402
from snap2slides.models.endpoint import Endpoint, ProviderType  # noqa: E402
from snap2slides.services.endpoint_manager import EndpointPoolManager  # noqa: E402
from snap2slides.services.llm_base import ResearchClient, VisionClient  # noqa: E402

# A scripted outcome: text to return, an exception to raise, or HANG
Outcome = Union[str, BaseException]
HANG = "__hang__"


class FakeClock:
    """Aware UTC clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class _ScriptedClient:
    """
    Returns scripted outcomes per endpoint id.

    A list of outcomes is consumed one per call; the last one repeats.
    Endpoints without a script answer with "<id> ok".
    """

    def __init__(self) -> None:
        self.scripts: Dict[str, List[Outcome]] = {}
        self.calls: List[str] = []

    def script(self, endpoint_id: str, *outcomes: Outcome) -> None:
        self.scripts[endpoint_id] = list(outcomes)

    async def _run(self, endpoint: Endpoint) -> str:
        self.calls.append(endpoint.id)
        outcomes = self.scripts.get(endpoint.id)
        if not outcomes:
            return f"{endpoint.id} ok"
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome == HANG:
            await asyncio.sleep(60)
        return outcome


class FakeVisionClient(_ScriptedClient, VisionClient):
    def __init__(self) -> None:
        super().__init__()
        self.prompts: List[str] = []

    async def generate(self, endpoint, content, mime_type, prompt):
        self.prompts.append(prompt)
        return await self._run(endpoint)


class FakeResearchClient(_ScriptedClient, ResearchClient):
    def __init__(self) -> None:
        super().__init__()
        self.queries: List[str] = []

    async def complete(self, endpoint, query):
        self.queries.append(query)
        return await self._run(endpoint)


def vision_endpoint(endpoint_id: str, timeout_ms: int = 30_000) -> Endpoint:
    return Endpoint(
        id=endpoint_id,
        provider_type=ProviderType.VISION,
        credential=f"secret-{endpoint_id}",
        timeout_ms=timeout_ms,
    )


def research_endpoint(endpoint_id: str = "perplexity_1", timeout_ms: int = 30_000) -> Endpoint:
    return Endpoint(
        id=endpoint_id,
        provider_type=ProviderType.RESEARCH,
        credential=f"secret-{endpoint_id}",
        base_url="https://research.test",
        timeout_ms=timeout_ms,
    )


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def vision_client():
    return FakeVisionClient()


@pytest.fixture
def research_client():
    return FakeResearchClient()


@pytest.fixture
def make_manager(clock, vision_client, research_client):
    """
    Build a manager over the fake clients.

    Usage:
        manager = make_manager(["gemini_1", "gemini_2"], research=True)
    """

    def _make(vision_ids: Sequence[str] = ("gemini_1", "gemini_2"), research: bool = True):
        endpoints = [vision_endpoint(i) for i in vision_ids]
        if research:
            endpoints.append(research_endpoint())
        return EndpointPoolManager(
            endpoints=endpoints,
            vision_client=vision_client,
            research_client=research_client,
            clock=clock,
        )

    return _make


@pytest.fixture
def app_settings():
    return Settings(
        _env_file=None,
        gemini_api_key_1="gemini-secret-one",
        gemini_api_key_2="gemini-secret-two",
        gemini_api_key_3="",
        perplexity_api_key="perplexity-secret",
        log_level="WARNING",
        max_file_size=1_048_576,
    )


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def test_app(app_settings, clock, vision_client, research_client):
    from snap2slides.main import create_app

    manager = EndpointPoolManager.from_settings(
        app_settings,
        vision_client=vision_client,
        research_client=research_client,
        clock=clock,
    )
    return create_app(app_settings=app_settings, endpoint_manager=manager)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the app (no server, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
