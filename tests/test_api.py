"""Tests for API routes."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import result_payload
from seoanalyzer.api.deps import get_orchestrator
from seoanalyzer.errors import ContentTooShort, FetchFailed, MalformedResponse, OrchestrationBusy
from seoanalyzer.main import app
from seoanalyzer.models.analysis import AnalysisResult
from seoanalyzer.models.events import EventType, ProgressEvent


@pytest.fixture
def orchestrator():
    fake = MagicMock()
    fake.busy = False
    fake.run = AsyncMock()
    fake.snapshot.return_value = {"state": "idle", "busy": False, "terminal": False}
    app.dependency_overrides[get_orchestrator] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(orchestrator):
    return TestClient(app)


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "seoanalyzer"


def test_analyze_returns_public_result_shape(client, orchestrator):
    orchestrator.run.return_value = AnalysisResult.model_validate(result_payload(8))

    response = client.post("/api/analyze", json={"url": "https://example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 8
    assert data["analysis"][0]["actionableSteps"] == ["Shorten intros", "Use plain words"]
    orchestrator.run.assert_awaited_once_with("https://example.com")


@pytest.mark.parametrize(
    ("exc", "status", "category"),
    [
        (ContentTooShort("only 12 chars", length=12), 400, "input"),
        (FetchFailed("Relay returned status code 500", status_code=500), 502, "retryable"),
        (MalformedResponse("no candidates"), 500, "unexpected"),
    ],
)
def test_analyze_maps_error_categories_to_status(client, orchestrator, exc, status, category):
    orchestrator.run.side_effect = exc

    response = client.post("/api/analyze", json={"url": "https://example.com"})

    assert response.status_code == status
    body = response.json()
    assert body["kind"] == exc.kind.value
    assert body["category"] == category
    assert body["message"]


def test_analyze_while_busy_is_conflict(client, orchestrator):
    orchestrator.run.side_effect = OrchestrationBusy("An analysis is already running.")

    response = client.post("/api/analyze", json={"url": "https://example.com"})

    assert response.status_code == 409
    assert response.json()["kind"] == "busy"


def test_analyze_requires_url(client):
    response = client.post("/api/analyze", json={})
    assert response.status_code == 422


def test_state_reports_snapshot(client, orchestrator):
    orchestrator.snapshot.return_value = {
        "state": "running",
        "busy": True,
        "terminal": False,
        "run_index": 1,
        "attempt_index": 2,
    }

    response = client.get("/api/analyze/state")

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "running"
    assert data["busy"] is True
    assert data["details"] == {"run_index": 1, "attempt_index": 2}


def test_stream_rejects_when_busy(client, orchestrator):
    orchestrator.analyze = MagicMock(side_effect=OrchestrationBusy("An analysis is already running."))
    response = client.get("/api/analyze/stream", params={"url": "https://example.com"})
    assert response.status_code == 409
    assert response.json()["kind"] == "busy"


def test_stream_emits_sse_frames(client, orchestrator):
    async def fake_analyze(url, *, cancel=None):
        yield ProgressEvent(EventType.STAGE_STARTED, {"stage": "fetching", "message": "Fetching your website..."})
        yield ProgressEvent(EventType.ANALYSIS_COMPLETE, {"result": result_payload(7), "runs": 2, "message": "done"})

    orchestrator.analyze = fake_analyze

    response = client.get("/api/analyze/stream", params={"url": "https://example.com"})

    assert response.status_code == 200
    body = response.text
    assert "event: stage_started" in body
    assert "event: analysis_complete" in body
    data_lines = [line[len("data: "):] for line in body.splitlines() if line.startswith("data: ")]
    assert json.loads(data_lines[-1])["result"]["score"] == 7
