from __future__ import annotations


def test_preserves_incoming_request_id_header(client):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_error_body_carries_request_id(client):
    incoming_id = "trace-me"
    resp = client.get("/api/transcriptions/missing", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 404
    assert resp.json()["error"]["request_id"] == incoming_id
    assert resp.headers.get("X-Request-ID") == incoming_id
