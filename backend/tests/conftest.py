"""
IdeaScope Backend — Shared Test Fixtures

Provides mocked versions of external services (LLM, competitor providers,
synthesizer) for deterministic, fast unit tests.
"""

import json
import os
import sys
from dataclasses import dataclass
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient, ASGITransport

# Ensure ideascope package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


# -----------------------------------------------------------------------------
# Environment Setup (before importing ideascope modules)
# -----------------------------------------------------------------------------

os.environ.setdefault("SERPAPI_API_KEY", "test-serpapi-key")
os.environ.setdefault("PERPLEXITY_API_KEY", "test-perplexity-key")
os.environ.setdefault("PRODUCTHUNT_TOKEN", "test-producthunt-token")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")


# -----------------------------------------------------------------------------
# Mock Response Classes
# -----------------------------------------------------------------------------


@dataclass
class MockLLMMessage:
    """Mock message from LLM response."""
    content: str


@dataclass
class MockLLMChoice:
    """Mock choice from LLM response."""
    message: MockLLMMessage


@dataclass
class MockLLMUsage:
    """Mock usage stats from LLM response."""
    total_tokens: int = 100
    prompt_tokens: int = 50
    completion_tokens: int = 50


@dataclass
class MockLLMResponse:
    """Mock LLM completion response."""
    choices: list[MockLLMChoice]
    usage: MockLLMUsage = None

    def __post_init__(self):
        if self.usage is None:
            self.usage = MockLLMUsage()


def create_mock_llm_response(content: str) -> MockLLMResponse:
    """Create a mock LLM response with given content."""
    return MockLLMResponse(
        choices=[MockLLMChoice(message=MockLLMMessage(content=content))]
    )


# -----------------------------------------------------------------------------
# Stub Pipeline Components
# -----------------------------------------------------------------------------


class StubProvider:
    """
    In-memory competitor provider.

    `responses` is consumed one entry per search() call; an Exception entry is
    raised instead of returned. When exhausted, the last entry repeats.
    """

    def __init__(self, responses, kind=None, name="stub"):
        from ideascope.providers import ProviderKind

        self.responses = list(responses)
        self.kind = kind or ProviderKind.WEB_SEARCH
        self.name = name
        self.queries: list[str] = []

    async def search(self, query: str):
        self.queries.append(query)
        index = min(len(self.queries) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, BaseException):
            raise response
        return response


class StubSynthesizer:
    """Returns a fixed SynthesisResult, or raises the configured error."""

    def __init__(self, result=None, error: Optional[BaseException] = None):
        self.result = result
        self.error = error
        self.calls: list[tuple] = []

    async def synthesize(self, idea, competitors):
        self.calls.append((idea, list(competitors)))
        if self.error is not None:
            raise self.error
        return self.result


# -----------------------------------------------------------------------------
# Mock Data Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def fitness_idea() -> str:
    return "An AI app that analyzes fitness workouts from video and gives posture feedback"


@pytest.fixture
def mock_search_hits():
    """Web search hits for a fitness idea: three products plus noise."""
    from ideascope.providers import SearchHit
    return [
        SearchHit(
            title="Tempo - Smart Home Fitness",
            snippet="AI-powered home workouts with real-time posture feedback.",
            link="https://tempo.fit",
        ),
        SearchHit(
            title="Best fitness apps of 2024",
            snippet="Our top picks for workouts.",
            link="https://www.healthline.com/best-fitness-apps",
        ),
        SearchHit(
            title="Onyx: AI Workout Coach",
            snippet="Your AI fitness coach counts reps and corrects form.",
            link="https://www.onyx.fitness",
        ),
        SearchHit(
            title="Kemtai | Digital Physical Therapy",
            snippet="Computer vision app for guided exercise and posture tracking.",
            link="https://kemtai.com",
        ),
        SearchHit(
            title="Fitness subreddit",
            snippet="Discussion of workouts.",
            link="https://reddit.com/r/fitness",
        ),
    ]


@pytest.fixture
def mock_synthesis_result():
    from ideascope.models import SynthesisResult
    return SynthesisResult(
        market_gaps=[
            "No app combines posture feedback with progressive programming.",
            "Few products work well with a single phone camera.",
            "Home users lack affordable form coaching.",
        ],
        positioning_suggestions=[
            "Lead with phone-only setup.",
            "Offer a free posture check to drive adoption.",
            "Partner with physiotherapists for credibility.",
        ],
        gap_analysis="No app combines posture feedback with progressive programming.",
    )


@pytest.fixture
def test_settings():
    """Explicit settings with every credential present."""
    from ideascope.config import Settings
    return Settings(
        competitor_provider="web_search",
        web_search_engine="serpapi",
        serpapi_api_key="test-serpapi-key",
        perplexity_api_key="test-perplexity-key",
        producthunt_token="test-producthunt-token",
        openai_api_key="test-openai-key",
        strict_config=False,
    )


@pytest.fixture
def empty_settings():
    """Explicit settings with no credentials at all."""
    from ideascope.config import Settings
    return Settings(
        competitor_provider="web_search",
        web_search_engine="serpapi",
        serpapi_api_key="",
        perplexity_api_key="",
        producthunt_token="",
        openai_api_key="",
        strict_config=False,
    )


# -----------------------------------------------------------------------------
# LLM Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_llm_with_response(monkeypatch):
    """
    Factory fixture to mock LLM with a specific response.

    Usage:
        def test_example(mock_llm_with_response):
            mock = mock_llm_with_response({"key": "value"})
    """
    def _create_mock(response_data):
        content = response_data if isinstance(response_data, str) else json.dumps(response_data)

        async def mock_acompletion(*args, **kwargs) -> MockLLMResponse:
            return create_mock_llm_response(content)

        mock = AsyncMock(side_effect=mock_acompletion)
        monkeypatch.setattr("litellm.acompletion", mock)
        return mock

    return _create_mock


@pytest.fixture
def mock_llm_failure(monkeypatch):
    """Mock LLM to simulate the provider failing."""
    async def mock_acompletion(*args, **kwargs):
        raise Exception("Rate limit exceeded")

    mock = AsyncMock(side_effect=mock_acompletion)
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


# -----------------------------------------------------------------------------
# HTTP Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def stub_orchestrator(test_settings, mock_search_hits, mock_synthesis_result):
    """Orchestrator wired to stub components; no network."""
    from ideascope.orchestrator import Orchestrator
    return Orchestrator(
        test_settings,
        provider=StubProvider([mock_search_hits]),
        synthesizer=StubSynthesizer(result=mock_synthesis_result),
    )


@pytest.fixture
async def client(stub_orchestrator, monkeypatch):
    """Async HTTP client for testing FastAPI endpoints, with the rate limiter off."""
    from ideascope.api.deps import get_orchestrator, limiter
    from ideascope.main import app

    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_orchestrator] = lambda: stub_orchestrator
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
