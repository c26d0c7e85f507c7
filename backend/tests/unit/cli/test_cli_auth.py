"""Tests for the ``flask auth`` command group."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
from evcharging.core.extensions import get_session_store


def test_issue_token_defaults_to_back_office(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["auth", "issue-token", "--subject", "operator-7"])

    assert result.exit_code == 0, result.output
    token = result.output.splitlines()[0]
    claims = jwt.decode(
        token,
        app.config["JWT_SECRET_KEY"],
        algorithms=["HS256"],
        audience=app.config["JWT_AUDIENCE"],
        issuer=app.config["JWT_ISSUER"],
    )
    assert claims["sub"] == "operator-7"
    assert claims["role"] == "BackOffice"


def test_issue_token_minutes_override(app):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["auth", "issue-token", "--subject", "operator-7", "--minutes", "2"]
    )

    token = result.output.splitlines()[0]
    exp = jwt.decode(token, options={"verify_signature": False})["exp"]
    remaining = datetime.fromtimestamp(exp, tz=UTC) - datetime.now(UTC)
    assert remaining <= timedelta(minutes=2)


def test_purge_sessions_removes_closed_records(app, db):
    store = get_session_store()
    live = store.create(
        owner_id="owner-1",
        user_type="EVOwner",
        refresh_token="live",
        expires_at=datetime.now(UTC) + timedelta(days=1),
    )
    closed = store.create(
        owner_id="owner-1",
        user_type="EVOwner",
        refresh_token="closed",
        expires_at=datetime.now(UTC) + timedelta(days=1),
    )
    store.deactivate(closed.id)

    result = app.test_cli_runner().invoke(args=["auth", "purge-sessions", "--days", "0"])

    assert result.exit_code == 0, result.output
    assert "Purged 1 session(s)." in result.output
    assert store.get(closed.id) is None
    assert store.get(live.id) is not None
