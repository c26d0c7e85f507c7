"""Silent access-token renewal at the request boundary.

Before a request reaches its view, the access cookie's ``exp`` claim is read
without verifying the signature. When fewer than
``TOKEN_REFRESH_THRESHOLD_SECONDS`` remain and a refresh cookie is present,
the session is rotated through :class:`AuthService` and the new pair is
written onto the outgoing response.

The hook never aborts a request or alters its status. Unreadable tokens and
failed refreshes leave the request untouched; signature and claim validation
stay with the normal auth layer.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import jwt
from flask import Flask, Response, current_app, g, request

from evcharging.api.cookies import read_refresh_cookie, set_auth_cookies
from evcharging.api.deps import get_auth_service
from evcharging.services._shared.errors import ServiceError
from evcharging.services.auth.dto import RefreshIn

log = logging.getLogger(__name__)

# Endpoints that manage cookies themselves
EXEMPT_ENDPOINTS = frozenset({"auth.login", "auth.refresh", "auth.logout"})

_RENEWED = "renewed_tokens"


def read_expiry(token: str) -> datetime | None:
    """Return the ``exp`` claim of an unverified JWT, or ``None`` if unreadable."""
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return None
    return datetime.fromtimestamp(exp, tz=UTC)


def renew_if_expiring() -> None:
    if request.endpoint in EXEMPT_ENDPOINTS:
        return

    cfg = current_app.config
    token = request.cookies.get(cfg.get("JWT_ACCESS_COOKIE_NAME", "accessToken"))
    if not token:
        return

    expires_at = read_expiry(token)
    if expires_at is None:
        return

    remaining = (expires_at - datetime.now(UTC)).total_seconds()
    if remaining > int(cfg.get("TOKEN_REFRESH_THRESHOLD_SECONDS", 300)):
        return

    refresh_token = read_refresh_cookie()
    if not refresh_token:
        return

    try:
        pair = get_auth_service().refresh(RefreshIn(refresh_token=refresh_token))
    except ServiceError as exc:
        log.info(
            "token renewal declined: %s",
            exc,
            extra={"event": "auth.renew", "outcome": "declined"},
        )
        return
    except Exception:
        # Best effort: the request proceeds with its current token
        log.warning(
            "token renewal failed",
            exc_info=True,
            extra={"event": "auth.renew", "outcome": "error"},
        )
        return

    setattr(g, _RENEWED, pair)
    log.info(
        "access token renewed",
        extra={"event": "auth.renew", "outcome": "ok", "owner_id": pair.owner_id},
    )


def apply_renewed_cookies(response: Response) -> Response:
    pair = g.pop(_RENEWED, None)
    if pair is not None:
        set_auth_cookies(response, pair)
    return response


def init_app(app: Flask) -> None:
    """Register the renewal hooks on ``app``."""

    app.before_request(renew_if_expiring)
    app.after_request(apply_renewed_cookies)


__all__ = ["EXEMPT_ENDPOINTS", "init_app", "read_expiry"]
