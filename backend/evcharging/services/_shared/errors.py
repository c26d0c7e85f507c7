"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
The translation to HTTP responses is handled by
:func:`evcharging.services._shared.base.translate_service_error`.

Authentication failures carry fixed, deliberately vague messages: callers must
not be able to tell an unknown NIC from a wrong password, or a missing
refresh token from an expired or revoked one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint name to match (e.g. ``uq_ev_owners_nic``).
    :type constraint_name: str
    :returns: ``True`` if the message mentions the constraint (PostgreSQL) or,
        on SQLite, the constrained column.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # SQLite reports "UNIQUE constraint failed: ev_owners.nic"
    column = constraint_name.lower().rsplit("_", 1)[-1]
    return f".{column}" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` instances.
    """

    message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def __str__(self) -> str:
        return self.message


# --------------------------------------------------------------------------- #
# Request / business-rule errors
# --------------------------------------------------------------------------- #


class ValidationFailedError(ServiceError):
    """
    Raised when input breaks a business rule (NIC format, password policy).

    :param message: Summary message.
    :param errors: Field-level messages.
    """

    message = "Invalid request data"

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a uniqueness rule is broken (duplicate NIC or email).

    :param entity: Entity name (e.g., ``"EVOwner"``).
    :type entity: str
    :param detail: Client-facing explanation (e.g., ``"NIC already exists"``).
    :type detail: str
    """

    entity: str
    detail: str

    def __post_init__(self) -> None:
        ServiceError.__init__(self, self.detail)

    def __str__(self) -> str:
        return self.detail


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., ``"EVOwner"``).
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    :param detail: Optional client-facing message.
    :type detail: str | None
    """

    entity: str
    key: str | int
    detail: str | None = field(default=None)

    def __post_init__(self) -> None:
        ServiceError.__init__(self, self.detail or "EV Owner not found")

    def __str__(self) -> str:
        return self.detail or "EV Owner not found"


class AuthorizationError(ServiceError):
    """Raised when the caller may not act on the target resource."""

    message = "You are not allowed to access this resource"


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Login failed: unknown NIC, inactive account or wrong password."""

    message = "Invalid credentials"


class InvalidOrExpiredRefreshTokenError(ServiceError):
    """Refresh failed: token unknown, session inactive or expired."""

    message = "Invalid or expired refresh token"


class InvalidRefreshTokenError(InvalidOrExpiredRefreshTokenError):
    """Logout failed: no active session carries the presented token."""

    message = "Invalid refresh token"


class AccountUnavailableError(ServiceError):
    """Refresh against an account that was deleted or deactivated."""

    message = "EV Owner not found or inactive"
