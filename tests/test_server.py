"""
HTTP tests for the FastAPI app (contract routes, AI routes, health).
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

VALID_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


def _lines(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def test_health(client):
    """GET /health returns 200 and status ok."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_stream_rejects_malformed_address(client, collaborators):
    """Malformed address: 400, no events, no collaborator call."""
    r = client.get("/api/contract/analyze-stream", params={"address": "abc"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid Solana address"
    collaborators.rpc.get_account_info.assert_not_awaited()


def test_stream_requires_address(client):
    """Missing address: 400 with "Address is required"."""
    r = client.get("/api/contract/analyze-stream")
    assert r.status_code == 400
    assert r.json()["detail"] == "Address is required"


def test_stream_not_found_single_line(client):
    """Unknown account: one NDJSON line, a complete event with the error."""
    r = client.get("/api/contract/analyze-stream", params={"address": VALID_MINT})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/x-ndjson")
    assert r.headers["cache-control"] == "no-cache"
    events = _lines(r)
    assert events == [{"type": "complete", "data": {"error": "Account not found", "address": VALID_MINT}}]


def test_stream_token_events(client, collaborators, mint_account_factory):
    """Token stream: every line is a JSON event; the last is complete with 31 checked."""
    collaborators.rpc.get_account_info = AsyncMock(return_value=mint_account_factory())
    r = client.get("/api/contract/analyze-stream", params={"address": VALID_MINT})
    events = _lines(r)
    assert events[0] == {"type": "step_start", "stepId": "account_type", "stepName": "Determining Account Type", "detectionMode": "token"}
    assert events[-2]["type"] == "data_update"
    assert events[-1]["type"] == "complete"
    assert events[-1]["paramsChecked"] == 31
    assert events[-1]["data"]["tokenData"]["decimals"] == 6


def test_analyze_returns_report(client, collaborators, mint_account_factory):
    """GET /api/contract/analyze returns the final report."""
    collaborators.rpc.get_account_info = AsyncMock(return_value=mint_account_factory())
    r = client.get("/api/contract/analyze", params={"address": VALID_MINT})
    assert r.status_code == 200
    body = r.json()
    assert body["address"] == VALID_MINT
    assert body["riskScore"]["grade"] == "A"


def test_analyze_not_found_404(client):
    """Unknown account on the one-shot route is a 404."""
    r = client.get("/api/contract/analyze", params={"address": VALID_MINT})
    assert r.status_code == 404
    assert r.json()["detail"] == "Account not found"


def test_analyze_lookup_failure_502(client, collaborators):
    """Lookup transport failure on the one-shot route is a 502."""
    collaborators.rpc.get_account_info = AsyncMock(side_effect=RuntimeError("connection refused"))
    r = client.get("/api/contract/analyze", params={"address": VALID_MINT})
    assert r.status_code == 502


def test_ai_status_unconfigured(client):
    """Without OPENROUTER_API_KEY the AI status is unconfigured."""
    r = client.get("/api/ai/status")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "unconfigured"
    assert body["configured"] is False


def test_ai_analyze_requires_detection_data(client):
    """POST /api/ai/analyze without detectionData is a 400."""
    r = client.post("/api/ai/analyze", json={})
    assert r.status_code == 400


def test_ai_analyze_unconfigured_500(client):
    """POST /api/ai/analyze with no keys is a 500."""
    r = client.post("/api/ai/analyze", json={"detectionData": {"address": VALID_MINT}})
    assert r.status_code == 500
    assert r.json()["detail"] == "AI analysis is not configured"
