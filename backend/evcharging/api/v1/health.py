"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text

from evcharging.api.deps import json_response, timing
from evcharging.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and session-store health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except Exception:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    backend = str(current_app.config.get("SESSION_STORE", "database")).lower()
    store_status = db_status
    if backend == "redis":
        try:
            get_redis().ping()
            store_status = "ok"
        except Exception:  # pragma: no cover - depends on Redis availability
            current_app.logger.exception("healthcheck.session_store_error")
            store_status = "fail"

    healthy = db_status == "ok" and store_status == "ok"
    version = current_app.config.get("APP_VERSION", "dev")
    payload = {
        "success": healthy,
        "message": "Service healthy" if healthy else "Service degraded",
        "data": {
            "db": db_status,
            "session_store": {"backend": backend, "status": store_status},
            "version": version,
        },
    }
    return json_response(payload, status=200 if healthy else 503)
