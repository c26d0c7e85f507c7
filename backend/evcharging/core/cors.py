"""CORS policy for the cookie-authenticated API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
EXPOSED_HEADERS = ["X-Request-ID", "Retry-After"]


def init_app(app: Flask) -> None:
    """Allow the configured frontend origins to call ``/api/*`` with credentials.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` setting (comma-separated) lists the
        trusted origins.

    Notes
    -----
    Auth travels in cookies, so credentials are always enabled and origins
    must be explicit: a ``"*"`` entry is dropped because browsers refuse
    credentialed responses for a wildcard origin.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip() and o.strip() != "*"]
    if not origins:
        app.logger.warning("CORS_ORIGINS is empty; cross-origin browser calls will be refused")

    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        methods=ALLOWED_METHODS,
        expose_headers=EXPOSED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
