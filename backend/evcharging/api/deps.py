"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from evcharging.core.errors import Forbidden
from evcharging.core.extensions import get_session_store
from evcharging.schemas.common import PaginationQuerySchema
from evcharging.services._shared.base import ServiceContext
from evcharging.services.auth.dto import AuthTokenConfig
from evcharging.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

AUTH_TOKEN_CONFIG_KEY = "auth_token_config"


@dataclass(slots=True)
class Pagination:
    """Container holding pagination arguments parsed from the request."""

    page: int
    limit: int
    sort: list[str]


def parse_pagination(default_limit: int = 20, max_limit: int = 200) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


# --------------------------------------------------------------------------- #
# Auth wiring
# --------------------------------------------------------------------------- #


def init_token_config(app: Flask) -> AuthTokenConfig:
    """Freeze the token configuration once per application."""

    cfg = AuthTokenConfig.from_mapping(app.config)
    app.extensions[AUTH_TOKEN_CONFIG_KEY] = cfg
    return cfg


def get_token_config() -> AuthTokenConfig:
    cfg = current_app.extensions.get(AUTH_TOKEN_CONFIG_KEY)
    if cfg is None:
        raise RuntimeError("Token configuration is not initialized.")
    return cast(AuthTokenConfig, cfg)


def get_auth_service() -> AuthService:
    """Build an :class:`AuthService` bound to the app's issuer and session store."""

    from evcharging.infra.jwt.flask_jwt_token_issuer import JWTTokenIssuer

    return AuthService(
        token_issuer=JWTTokenIssuer(cfg=get_token_config()),
        session_store=get_session_store(),
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*roles: str) -> Callable[[F], F]:
    """Ensure the verified JWT carries one of ``roles`` in its ``role`` claim."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            verify_jwt_in_request(optional=False)
            claims = get_jwt() or {}
            if claims.get("role") not in roles:
                raise Forbidden("You are not allowed to access this resource")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def service_context() -> ServiceContext:
    """Build the request's :class:`ServiceContext` from the verified JWT.

    Anonymous requests yield an empty context.
    """

    verify_jwt_in_request(optional=True)
    claims = get_jwt() or {}
    return ServiceContext(
        actor_id=claims.get("sub"),
        role=claims.get("role"),
        nic=claims.get("nic"),
        request_id=getattr(g, "request_id", None),
    )


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def envelope(message: str, data: Any = None, *, status: int = 200, **extra: Any) -> Response:
    """Return the success envelope ``{"success": true, "message", "data"}``."""

    body: dict[str, Any] = {"success": True, "message": message, "data": data}
    body.update(extra)
    return json_response(body, status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
