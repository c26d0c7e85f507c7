"""Auth cookie contract.

Both cookies are HTTP-only and cross-site capable. The access cookie is
scoped to the API path and the refresh cookie to the refresh endpoint; each
expires together with the token it carries.
"""

from __future__ import annotations

from datetime import datetime

from flask import Response, current_app, request

from evcharging.services.auth.dto import TokenPairOut


def _common() -> dict:
    cfg = current_app.config
    return {
        "httponly": True,
        "secure": bool(cfg.get("JWT_COOKIE_SECURE", True)),
        "samesite": cfg.get("JWT_COOKIE_SAMESITE", "None"),
    }


def _access_cookie() -> tuple[str, str]:
    cfg = current_app.config
    return cfg.get("JWT_ACCESS_COOKIE_NAME", "accessToken"), cfg.get("JWT_ACCESS_COOKIE_PATH", "/api")


def _refresh_cookie() -> tuple[str, str]:
    cfg = current_app.config
    return (
        cfg.get("REFRESH_COOKIE_NAME", "refreshToken"),
        cfg.get("REFRESH_COOKIE_PATH", "/api/v1/auth/refresh"),
    )


def set_auth_cookies(response: Response, pair: TokenPairOut) -> Response:
    """Write both token cookies onto ``response``."""

    set_access_cookie(response, pair.access_token, pair.access_expires_at)
    name, path = _refresh_cookie()
    response.set_cookie(
        name,
        pair.refresh_token,
        expires=pair.refresh_expires_at,
        path=path,
        **_common(),
    )
    return response


def set_access_cookie(response: Response, token: str, expires_at: datetime) -> Response:
    name, path = _access_cookie()
    response.set_cookie(name, token, expires=expires_at, path=path, **_common())
    return response


def clear_auth_cookies(response: Response) -> Response:
    """Expire both cookies on the paths they were set with."""

    for name, path in (_access_cookie(), _refresh_cookie()):
        response.delete_cookie(name, path=path, **_common())
    return response


def read_refresh_cookie() -> str | None:
    name, _ = _refresh_cookie()
    return request.cookies.get(name) or None
