"""Unit tests for the Flask-JWT-Extended token issuer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
from evcharging.api.deps import get_token_config
from evcharging.infra.jwt.flask_jwt_token_issuer import JWTTokenIssuer


def _decode(app, token: str) -> dict:
    return jwt.decode(
        token,
        app.config["JWT_SECRET_KEY"],
        algorithms=["HS256"],
        audience=app.config["JWT_AUDIENCE"],
        issuer=app.config["JWT_ISSUER"],
    )


def test_access_token_claims(app):
    issuer = JWTTokenIssuer(cfg=get_token_config())
    issued = issuer.issue_access_token(
        owner_id="owner-1", user_type="EVOwner", role="EVOwner", nic="123456789V"
    )

    claims = _decode(app, issued.token)
    assert claims["sub"] == "owner-1"
    assert claims["role"] == "EVOwner"
    assert claims["user_type"] == "EVOwner"
    assert claims["nic"] == "123456789V"
    assert claims["type"] == "access"
    assert claims["jti"]
    assert claims["exp"] == int(issued.expires_at.timestamp())


def test_access_lifetime_follows_config(app):
    issued = JWTTokenIssuer(cfg=get_token_config()).issue_access_token(
        owner_id="owner-1", user_type="EVOwner", role="EVOwner"
    )

    remaining = issued.expires_at - datetime.now(UTC)
    expected = timedelta(minutes=app.config["JWT_EXPIRATION_MINUTES"])
    assert expected - timedelta(seconds=5) < remaining <= expected
    assert "nic" not in _decode(app, issued.token)


def test_refresh_tokens_are_opaque_and_unique(app):
    issuer = JWTTokenIssuer(cfg=get_token_config())
    tokens = {issuer.issue_refresh_token().token for _ in range(50)}

    assert len(tokens) == 50
    sample = next(iter(tokens))
    assert sample.count(".") == 0
    assert len(sample) >= 64

    refresh = issuer.issue_refresh_token()
    lifetime = refresh.expires_at - datetime.now(UTC)
    assert timedelta(days=7) - timedelta(seconds=5) < lifetime <= timedelta(days=7)
