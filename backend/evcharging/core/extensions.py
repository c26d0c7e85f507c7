"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None

SESSION_STORE_KEY = "session_store"


def _apply_engine_timeouts(app: Flask) -> None:
    """Bound database I/O with ``STORE_TIMEOUT_SECONDS``.

    SQLite takes a busy ``timeout`` connect argument; pooled servers get a
    pool checkout timeout and, for PostgreSQL, a connect timeout.
    """
    uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    timeout = int(app.config.get("STORE_TIMEOUT_SECONDS", 5))
    options: dict[str, Any] = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(options.get("connect_args") or {})
    if uri.startswith("sqlite"):
        connect_args.setdefault("timeout", timeout)
    else:
        options.setdefault("pool_timeout", timeout)
        if uri.startswith("postgresql"):
            connect_args.setdefault("connect_timeout", timeout)
    options["connect_args"] = connect_args
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options


def _sync_jwt_settings(app: Flask) -> None:
    """Derive ``flask-jwt-extended`` keys from the canonical JWT settings."""
    cfg = app.config
    cfg["JWT_ENCODE_ISSUER"] = cfg["JWT_DECODE_ISSUER"] = cfg.get("JWT_ISSUER")
    cfg["JWT_ENCODE_AUDIENCE"] = cfg["JWT_DECODE_AUDIENCE"] = cfg.get("JWT_AUDIENCE")
    cfg["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=int(cfg.get("JWT_EXPIRATION_MINUTES", 60)))


def _init_redis(app: Flask) -> None:
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    timeout = int(app.config.get("STORE_TIMEOUT_SECONDS", 5))
    redis_client = redis.Redis.from_url(
        redis_url,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def _init_session_store(app: Flask) -> None:
    """Select the refresh-session backend named by ``SESSION_STORE``."""
    backend = str(app.config.get("SESSION_STORE", "database")).strip().lower()
    if backend == "redis":
        from evcharging.infra.redis.redis_session_store import RedisSessionStore

        app.extensions[SESSION_STORE_KEY] = RedisSessionStore(r=get_redis())
    elif backend == "database":
        from evcharging.infra.db.sqlalchemy_session_store import SQLAlchemySessionStore

        app.extensions[SESSION_STORE_KEY] = SQLAlchemySessionStore()
    else:
        raise RuntimeError(f"Unknown SESSION_STORE backend {backend!r}")


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT, rate limiting and the session store.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`evcharging.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    _apply_engine_timeouts(app)
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from evcharging import models as _models  # noqa: F401

    migrate.init_app(app, db)

    _sync_jwt_settings(app)
    jwt.init_app(app)
    limiter.init_app(app)

    _init_redis(app)
    _init_session_store(app)


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Set REDIS_URL and call init_app().")
    return redis_client


def get_session_store() -> Any:
    """Return the session store bound to the current application."""
    store = current_app.extensions.get(SESSION_STORE_KEY)
    if store is None:
        raise RuntimeError("Session store is not initialized. Call init_app() first.")
    return store
