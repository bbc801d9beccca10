"""
IdeaScope Backend — API Endpoint Unit Tests

Tests for REST endpoints: health check, idea analysis, summary.
All tests use a stub orchestrator - no real API requests.
"""

import asyncio
import re

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi import status

from ideascope.api import analyze
from ideascope.api.deps import get_orchestrator, limiter
from ideascope.config import Settings
from ideascope.errors import ConfigurationError
from ideascope.main import app, create_app
from ideascope.orchestrator import Orchestrator


# -----------------------------------------------------------------------------
# Health Check Tests
# -----------------------------------------------------------------------------


class TestHealthCheck:
    """Tests for /api/health endpoint."""

    @pytest.mark.asyncio
    async def test_health_check_returns_ok(self, client):
        response = await client.get("/api/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok", "version": "0.1.0"}


# -----------------------------------------------------------------------------
# App Factory
# -----------------------------------------------------------------------------


class TestCreateApp:
    """Tests for create_app() startup behaviour."""

    def test_builds_orchestrator_at_startup(self):
        created = create_app(Settings(serpapi_api_key="k", openai_api_key="k"))
        assert isinstance(created.state.orchestrator, Orchestrator)

    def test_strict_config_fails_at_startup(self):
        with pytest.raises(ConfigurationError):
            create_app(Settings(serpapi_api_key="", openai_api_key="k", strict_config=True))

    def test_missing_credentials_degrade_when_not_strict(self):
        created = create_app(Settings(serpapi_api_key="", openai_api_key="", strict_config=False))
        assert created.state.orchestrator.missing_credentials == ["serpapi_api_key", "openai_api_key"]


# -----------------------------------------------------------------------------
# Analysis Tests (POST /api/analyze-idea)
# -----------------------------------------------------------------------------


class TestAnalyzeIdea:
    """Tests for POST /api/analyze-idea endpoint."""

    @pytest.mark.asyncio
    async def test_full_analysis_uses_camel_case(self, client, fitness_idea):
        response = await client.post("/api/analyze-idea", json={"idea": fitness_idea})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [c["name"] for c in data["competitors"]] == ["Tempo", "Onyx", "Kemtai"]
        assert len(data["marketGaps"]) == 3
        assert len(data["positioningSuggestions"]) == 3
        assert data["gapAnalysis"]
        assert isinstance(data["validationScore"], int)
        assert "problemClarity" in data["scoreBreakdown"]
        assert data["fallbackFlags"] == {"competitorSearchFailed": None, "synthesisFailed": None}

    @pytest.mark.asyncio
    async def test_competitors_only_response_is_trimmed(self, client, fitness_idea):
        response = await client.post(
            "/api/analyze-idea",
            json={"idea": fitness_idea, "analysisType": "competitors-only"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert set(response.json()) == {"competitors", "fallbackFlags", "searchQuery"}

    @pytest.mark.asyncio
    async def test_differentiation_response_is_trimmed(self, client, fitness_idea):
        response = await client.post(
            "/api/analyze-idea",
            json={"idea": fitness_idea, "analysisType": "differentiation-suggestions"},
        )

        assert set(response.json()) == {"positioningSuggestions", "fallbackFlags"}

    @pytest.mark.asyncio
    async def test_structured_form_is_accepted(self, client):
        response = await client.post(
            "/api/analyze-idea",
            json={"form": {"problem": "Bad posture during home workouts", "targetMarket": "Home fitness users"}},
        )

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"idea": ""}, {"idea": "   "}, {"form": {}}])
    async def test_missing_idea_returns_400(self, client, body):
        response = await client.post("/api/analyze-idea", json=body)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Idea is required"}

    @pytest.mark.asyncio
    async def test_rejects_too_long_idea(self, client):
        response = await client.post("/api/analyze-idea", json={"idea": "a" * 2001})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["error"].startswith("Invalid idea")
        assert re.fullmatch(r"IS-[0-9A-F]{6}", data["error_code"])
        assert "detail" not in data

    @pytest.mark.asyncio
    async def test_rejects_unknown_analysis_type(self, client):
        response = await client.post("/api/analyze-idea", json={"idea": "x", "analysisType": "everything"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "analysisType" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_rejects_invalid_json(self, client):
        response = await client.post(
            "/api/analyze-idea",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = response.json()
        assert data["error"] == "Request body is not valid JSON"
        assert re.fullmatch(r"IS-[0-9A-F]{6}", data["error_code"])

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_500_with_code(self, client):
        broken = MagicMock()
        broken.run = AsyncMock(side_effect=RuntimeError("database exploded"))
        app.dependency_overrides[get_orchestrator] = lambda: broken

        response = await client.post("/api/analyze-idea", json={"idea": "A fitness app"})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = response.json()
        assert re.fullmatch(r"IS-[0-9A-F]{6}", data["error_code"])
        assert "database exploded" not in data["error"]

    @pytest.mark.asyncio
    async def test_rate_limit(self, client, monkeypatch, fitness_idea):
        monkeypatch.setattr(limiter, "enabled", True)
        limiter.reset()
        try:
            statuses = []
            for _ in range(21):
                response = await client.post(
                    "/api/analyze-idea",
                    json={"idea": fitness_idea, "analysisType": "competitors-only"},
                )
                statuses.append(response.status_code)
        finally:
            limiter.reset()

        assert statuses[:20] == [status.HTTP_200_OK] * 20
        assert statuses[20] == status.HTTP_429_TOO_MANY_REQUESTS


# -----------------------------------------------------------------------------
# Disconnect Handling
# -----------------------------------------------------------------------------


class TestRunUntilDisconnect:
    """Tests for the client-disconnect cancellation helper."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=False)

        async def work():
            return 42

        assert await analyze._run_until_disconnect(request, work()) == 42

    @pytest.mark.asyncio
    async def test_cancels_pipeline_on_disconnect(self, monkeypatch):
        monkeypatch.setattr(analyze, "DISCONNECT_POLL_SECONDS", 0.01)
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=True)
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(analyze.ClientDisconnected):
            await analyze._run_until_disconnect(request, work())

        await asyncio.sleep(0.01)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_pipeline_errors_propagate(self):
        request = MagicMock()
        request.is_disconnected = AsyncMock(return_value=False)

        async def work():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            await analyze._run_until_disconnect(request, work())


# -----------------------------------------------------------------------------
# Summary Tests (POST /api/summary)
# -----------------------------------------------------------------------------


class TestSummary:
    """Tests for POST /api/summary endpoint."""

    @pytest.mark.asyncio
    async def test_returns_markdown_and_html(self, client):
        response = await client.post(
            "/api/summary",
            json={
                "idea": "AI posture coach",
                "competitors": [{"name": "Tempo", "website": "https://tempo.fit", "description": "Smart gym"}],
                "marketGaps": ["Phone-only setup"],
                "differentiation": "Free posture check",
                "validationPlan": "Interview users",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert "### 1. Tempo" in data["markdown"]
        assert "* Phone-only setup" in data["markdown"]
        assert "<h3>1. Tempo</h3>" in data["html"]

    @pytest.mark.asyncio
    async def test_rejects_empty_idea(self, client):
        response = await client.post("/api/summary", json={"idea": ""})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"].startswith("Invalid idea")
