"""Smoke tests for the health endpoint and error envelope."""

from __future__ import annotations


def test_health_reports_database_store(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["db"] == "ok"
    assert body["data"]["session_store"] == {"backend": "database", "status": "ok"}
    assert resp.headers.get("X-Request-ID")


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_unknown_route_uses_failure_envelope(client):
    resp = client.get("/api/v1/nope")

    body = resp.get_json()
    assert resp.status_code == 404
    assert body["success"] is False
    assert body["message"]
