"""Authentication endpoints using the service layer."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from evcharging.api.cookies import clear_auth_cookies, read_refresh_cookie, set_auth_cookies
from evcharging.api.deps import envelope, get_auth_service, require_auth, timing
from evcharging.core.errors import Unauthorized
from evcharging.core.extensions import limiter
from evcharging.schemas import AuthSessionSchema, LoginSchema
from evcharging.services._shared.errors import ServiceError
from evcharging.services.auth.dto import LoginIn, LogoutIn, RefreshIn

log = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

login_schema = LoginSchema()
session_schema = AuthSessionSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "10 per 1 minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate NIC and password; set the access and refresh cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().login(LoginIn(nic=data["nic"], password=data["password"]))
    response = envelope("Login successful", session_schema.dump(pair))
    return set_auth_cookies(response, pair)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh cookie's session and reissue both cookies."""

    refresh_token = read_refresh_cookie()
    if not refresh_token:
        raise Unauthorized("No refresh token found", code="missing_refresh_token")
    pair = get_auth_service().refresh(RefreshIn(refresh_token=refresh_token))
    response = envelope("Token refreshed successfully", session_schema.dump(pair))
    return set_auth_cookies(response, pair)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Close the refresh cookie's session (when sent) and clear both cookies."""

    refresh_token = read_refresh_cookie()
    if refresh_token:
        try:
            get_auth_service().logout(LogoutIn(refresh_token=refresh_token))
        except ServiceError as exc:
            # Stale or foreign cookie; the client is logged out either way
            log.info("logout without active session: %s", exc, extra={"event": "auth.logout"})
    return clear_auth_cookies(envelope("Logged out successfully"))
