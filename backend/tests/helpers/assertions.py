"""Assertion helper utilities for tests."""

from __future__ import annotations


def assert_success(resp, message: str, status: int = 200) -> dict:
    """Assert a success envelope and return its body."""

    body = resp.get_json()
    assert resp.status_code == status, body
    assert body["success"] is True
    assert body["message"] == message
    return body


def assert_failure(resp, status: int, message: str) -> dict:
    """Assert a failure envelope (``success`` false, fixed message)."""

    body = resp.get_json()
    assert resp.status_code == status, body
    assert body["success"] is False
    assert body["message"] == message
    assert isinstance(body["errors"], list)
    return body
