"""Tests for the health and info endpoints."""

from unittest.mock import AsyncMock


def test_health_reports_connected_store(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Server is healthy"
    assert body["data"]["status"] == "ok"
    assert body["data"]["database"] == {"connected": True}
    assert body["data"]["uptime_seconds"] >= 0


def test_health_returns_503_when_store_unreachable(client, monkeypatch):
    monkeypatch.setattr(client.app.state.repository, "ping", AsyncMock(return_value=False))

    response = client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["data"]["status"] == "degraded"
    assert body["data"]["database"] == {"connected": False}


def test_info_lists_endpoints(client):
    response = client.get("/api/info")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Transcription API"
    assert data["version"] == "1.0.0"
    assert data["docs"].endswith("/docs")
    assert data["endpoints"]["transcription"]["url"].endswith("/api/transcription")
    assert data["endpoints"]["speechTranscription"]["method"] == "POST"


def test_openapi_documents_rate_limit_response(client):
    schema = client.get("/openapi.json").json()

    operation = schema["paths"]["/api/transcription"]["post"]
    assert "429" in operation["responses"]
    assert "429" not in schema["paths"]["/health"]["get"]["responses"]
