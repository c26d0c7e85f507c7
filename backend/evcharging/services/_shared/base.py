# evcharging/services/_shared/base.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from evcharging.core import errors as api_errors
from evcharging.repositories.base import Pagination
from evcharging.services._shared.errors import (
    AccountUnavailableError,
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredRefreshTokenError,
    NotFoundError,
    ServiceError,
    ValidationFailedError,
)
from evcharging.services._shared.policies.common import can_manage_owner, is_back_office
from evcharging.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (principal, request ids, etc.).

    :param actor_id: Authenticated principal identifier (``sub`` claim).
    :param role: Role tag of the principal (``EVOwner``, ``BackOffice``...).
    :param nic: NIC claim, when the principal is an owner.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: str | None = None
    role: str | None = None
    nic: str | None = None
    request_id: str | None = None


def translate_service_error(exc: ServiceError) -> api_errors.APIError:
    """
    Map a service-level error to its API-level (HTTP) counterpart.

    :param exc: Exception raised within the service layer.
    :type exc: ServiceError
    :returns: API error carrying status, code and envelope message.
    :rtype: APIError
    """
    if isinstance(exc, ValidationFailedError):
        return api_errors.BadRequest(str(exc), errors=exc.errors)

    if isinstance(exc, ConflictError):
        # Duplicate NIC/email are business-rule failures → 400
        return api_errors.BadRequest(str(exc), code="conflict", errors=[str(exc)])

    if isinstance(exc, InvalidCredentialsError):
        return api_errors.Unauthorized(str(exc), code="invalid_credentials")

    if isinstance(exc, InvalidOrExpiredRefreshTokenError):
        return api_errors.Unauthorized(str(exc), code="invalid_refresh_token")

    if isinstance(exc, AccountUnavailableError):
        return api_errors.Unauthorized(str(exc), code="account_unavailable")

    if isinstance(exc, AuthorizationError):
        return api_errors.Forbidden(str(exc))

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    # Any other ServiceError subclass → 400 Bad Request
    return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared validation helpers (pagination/sorting).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (principal, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :type page: int
        :param limit: Page size.
        :type limit: int
        :param sort: Sort tokens like ["-created_at", "nic"].
        :type sort: Iterable[str] | None
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = max(1, int(limit))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ServiceError):
            return translate_service_error(exc)
        # Fallback: return untouched (will bubble up to Flask handler)
        return exc

    # --------------------------- AuthZ --------------------------------

    def ensure_owner_or_back_office(self, owner_id: str) -> None:
        """
        Ensure the current principal is ``owner_id`` itself or a back-office user.

        :param owner_id: Target owner account id.
        :type owner_id: str
        :raises AuthorizationError: If the principal may not act on the account.
        """
        if not can_manage_owner(
            actor_id=self.ctx.actor_id, role=self.ctx.role, owner_id=owner_id
        ):
            raise AuthorizationError()

    def ensure_nic_owner_or_back_office(self, nic: str) -> None:
        """Same check as :meth:`ensure_owner_or_back_office`, keyed by NIC."""
        if is_back_office(self.ctx.role):
            return
        if not self.ctx.nic or self.ctx.nic.strip().upper() != (nic or "").strip().upper():
            raise AuthorizationError()

    def ensure_back_office(self) -> None:
        """
        :raises AuthorizationError: Unless the principal holds the back-office role.
        """
        if not is_back_office(self.ctx.role):
            raise AuthorizationError()
