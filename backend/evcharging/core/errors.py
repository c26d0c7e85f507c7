"""Centralized JSON error handling for the API.

Every failure is rendered with the same envelope used by successful
responses::

    {"success": false, "message": "...", "errors": [...], "code": "...",
     "request_id": "..."}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from http import HTTPStatus
from typing import Any, cast
from uuid import uuid4

from flask import Flask, Response, g, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

log = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


def _ensure_request_id() -> str:
    """
    Get or generate a request-scoped correlation identifier.

    The function reads standard correlation headers and falls back
    to a newly generated UUID4. The value is stored in ``g.request_id``.

    :returns: Correlation/request identifier.
    :rtype: str
    """
    if hasattr(g, "request_id"):
        return cast(str, g.request_id)

    hdr = request.headers.get("X-Request-Id") or request.headers.get("X-Correlation-Id")
    req_id = hdr or str(uuid4())
    g.request_id = req_id
    return req_id


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def flatten_messages(messages: Any, prefix: str = "") -> list[str]:
    """
    Flatten nested marshmallow messages into ``"field: message"`` strings.

    :param messages: ``ValidationError.messages`` (dict, list or str).
    :param prefix: Dotted path accumulated while descending.
    :returns: Flat list of human-readable messages.
    :rtype: list[str]
    """
    if isinstance(messages, Mapping):
        out: list[str] = []
        for key, value in messages.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            out.extend(flatten_messages(value, path))
        return out
    if isinstance(messages, str):
        return [f"{prefix}: {messages}" if prefix else messages]
    if isinstance(messages, Iterable):
        out = []
        for item in messages:
            out.extend(flatten_messages(item, prefix))
        return out
    return [f"{prefix}: {messages}" if prefix else str(messages)]


def _as_envelope(
    *,
    code: str,
    message: str,
    errors: list[str] | None = None,
) -> dict[str, Any]:
    """
    Build the failure envelope.

    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param errors: Optional field-level messages.
    :returns: JSON-serializable dictionary.
    :rtype: dict
    """
    return {
        "success": False,
        "message": message,
        "errors": list(errors or []),
        "code": code,
        "request_id": _ensure_request_id(),
    }


def error_response(
    status: int,
    message: str,
    *,
    code: str | None = None,
    errors: list[str] | None = None,
) -> tuple[Response, int]:
    """Return a ``(response, status)`` pair carrying the failure envelope."""
    body = _as_envelope(
        code=code or _http_status_to_code(int(status)),
        message=message,
        errors=errors,
    )
    return jsonify(body), int(status)


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case. Defaults to
        ``"bad_request"``.
    errors : list[str] | None, optional
        Field-level messages included in the response body.

    Attributes
    ----------
    message : str
        Error summary stored for serialization.
    status_code : int
        HTTP status code returned to the client.
    code : str
        Stable machine-readable identifier.
    errors : list[str]
        Field-level messages specific to the error instance.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.errors = list(errors or [])

    def to_envelope(self) -> dict[str, Any]:
        """
        Serialize error metadata into the failure envelope.

        :returns: Envelope dictionary.
        :rtype: dict
        """
        return _as_envelope(code=self.code, message=self.message, errors=self.errors)


# Domain conveniences
class BadRequest(APIError):
    """400 for validation and business-rule violations."""

    def __init__(
        self,
        message: str = "Invalid request data",
        *,
        code: str = "validation_error",
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code=code, errors=errors)


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized", *, code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


class Forbidden(APIError):
    """403 when authorization denies access."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code="forbidden")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees the failure envelope for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """
    from evcharging.services._shared.base import translate_service_error
    from evcharging.services._shared.errors import ServiceError

    @app.before_request
    def _seed_request_id() -> None:
        """Seed request id early for logs and downstream usage."""
        _ensure_request_id()

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_envelope()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            body.get("request_id"),
        )
        return jsonify(body), err.status_code

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(translate_service_error(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        if status == HTTPStatus.TOO_MANY_REQUESTS:
            message = RATE_LIMIT_MESSAGE
        if status >= 500:
            message = GENERIC_ERROR_MESSAGE
        response, _ = error_response(status, message, code=error_code)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            _ensure_request_id(),
        )
        # Keep headers such as Retry-After / Allow set by werkzeug or the limiter
        for key, value in err.get_headers():
            if key.lower() != "content-type":
                response.headers.setdefault(key, value)
        return response, status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        errors = flatten_messages(err.messages)
        log.warning("ValidationError: errors=%s request_id=%s", errors, _ensure_request_id())
        return error_response(
            HTTPStatus.BAD_REQUEST,
            "Invalid request data",
            code="validation_error",
            errors=errors,
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError: request_id=%s", _ensure_request_id(), exc_info=True)
        return error_response(HTTPStatus.BAD_REQUEST, "Resource conflict", code="conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # Stalled or unreachable database
        log.error("OperationalError: request_id=%s", _ensure_request_id(), exc_info=True)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)

    @app.errorhandler(RedisError)
    def handle_redis_error(err: RedisError):
        log.error("RedisError: request_id=%s", _ensure_request_id(), exc_info=True)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        log.error("Unhandled exception: request_id=%s", _ensure_request_id(), exc_info=True)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
