"""
OwnerService
============

Application service for the ``EVOwner`` aggregate:

- Public self-registration with NIC, uniqueness and password-policy checks.
- Retrieval by id or NIC, and paginated listings for back-office users.
- Profile updates (the NIC is immutable), deactivation, reactivation and
  hard deletion.

Notes
-----
- Authorization is checked before existence so a 403 never reveals whether
  an account exists.
- Read operations use ``ro_uow()``; write operations use ``rw_uow()``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from evcharging.core.security import PASSWORD_POLICY_MESSAGE, password_policy_errors
from evcharging.models.owner import EVOwner
from evcharging.repositories.owner import OwnerRepository, normalize_nic
from evcharging.services._shared.base import BaseService, ServiceContext
from evcharging.services._shared.dto import PageMeta
from evcharging.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationFailedError,
    violates,
)
from evcharging.services._shared.ports.session_store import SessionStore
from evcharging.services.owners.dto import (
    OwnerListIn,
    OwnerListOut,
    OwnerOut,
    OwnerRegisterIn,
    OwnerUpdateIn,
    VehicleData,
)

log = logging.getLogger(__name__)

NIC_MIN_LENGTH = 9
ENTITY = "EVOwner"


class OwnerService(BaseService):
    """
    Application service for the ``EVOwner`` aggregate.

    :param ctx: Request-scoped principal.
    :param session_store: When given, sessions of deactivated or deleted
        accounts are closed immediately instead of on their next refresh.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.sessions = session_store

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: OwnerRegisterIn) -> OwnerOut:
        """
        Create a new, active owner account.

        :param dto: Registration payload.
        :type dto: :class:`OwnerRegisterIn`
        :returns: The created account (never the password hash).
        :rtype: :class:`OwnerOut`
        :raises ValidationFailedError: Invalid NIC format or weak password.
        :raises ConflictError: NIC or email already registered.
        """
        nic = normalize_nic(dto.nic)
        if len(nic) < NIC_MIN_LENGTH:
            raise ValidationFailedError("Invalid NIC format", errors=["nic: Invalid NIC format"])

        with self.rw_uow() as uow:
            repo: OwnerRepository = uow.owners
            if repo.exists_by_nic(nic):
                raise ConflictError(ENTITY, "NIC already exists")
            if repo.exists_by_email(dto.email):
                raise ConflictError(ENTITY, "Email already exists")

            policy = password_policy_errors(dto.password)
            if policy:
                raise ValidationFailedError(PASSWORD_POLICY_MESSAGE, errors=policy)

            try:
                owner = EVOwner(
                    nic=nic,
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    email=dto.email,
                    phone_number=dto.phone_number,
                    is_active=True,
                )
                owner.password = dto.password
                repo.replace_vehicles(owner, _vehicle_rows(dto.vehicles))
            except ValueError as exc:
                raise ValidationFailedError(errors=[str(exc)]) from exc

            try:
                repo.add(owner)
            except IntegrityError as exc:
                # A concurrent registration won the unique index
                raise _conflict_from(exc) from exc

            log.info("owner registered", extra={"event": "owner.register", "owner_id": owner.id})
            return self._to_out(owner)

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def get(self, owner_id: str) -> OwnerOut:
        """
        :raises AuthorizationError: Caller is neither the owner nor back-office.
        :raises NotFoundError: No such account.
        """
        self.ensure_owner_or_back_office(owner_id)
        with self.ro_uow() as uow:
            owner = uow.owners.get(owner_id)
            if owner is None:
                raise NotFoundError(ENTITY, owner_id)
            return self._to_out(owner)

    def get_by_nic(self, nic: str) -> OwnerOut:
        """Fetch an account by NIC (case-insensitive)."""
        self.ensure_nic_owner_or_back_office(nic)
        with self.ro_uow() as uow:
            owner = uow.owners.get_by_nic(nic)
            if owner is None:
                raise NotFoundError(ENTITY, nic)
            return self._to_out(owner)

    def list_owners(self, dto: OwnerListIn) -> OwnerListOut:
        """
        List owners with pagination (back-office only).

        :param dto: Paging, sorting and optional ``is_active`` filter.
        :type dto: :class:`OwnerListIn`
        :rtype: :class:`OwnerListOut`
        """
        self.ensure_back_office()
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        with self.ro_uow() as uow:
            page = uow.owners.paginate(pagination, filters={"is_active": dto.is_active})
            items = [self._to_out(o) for o in page.items]
        return OwnerListOut(
            items=items,
            meta=PageMeta(
                page=page.page,
                limit=page.limit,
                total=page.total,
                has_prev=page.page > 1,
                has_next=page.page * page.limit < page.total,
            ),
        )

    def list_deactivated(self) -> list[OwnerOut]:
        """Every inactive account, oldest first (back-office reactivation queue)."""
        self.ensure_back_office()
        with self.ro_uow() as uow:
            owners = uow.owners.list_by_activity(is_active=False)
            return [self._to_out(o) for o in owners]

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def update(self, dto: OwnerUpdateIn) -> OwnerOut:
        """
        Update profile fields and optionally replace the vehicle list.

        :raises ConflictError: The new email belongs to another account.
        :raises ValidationFailedError: A field fails model validation.
        """
        self.ensure_owner_or_back_office(dto.owner_id)
        with self.rw_uow() as uow:
            repo: OwnerRepository = uow.owners
            owner = repo.get(dto.owner_id)
            if owner is None:
                raise NotFoundError(ENTITY, dto.owner_id)

            fields = {
                k: v
                for k, v in {
                    "first_name": dto.first_name,
                    "last_name": dto.last_name,
                    "email": dto.email,
                    "phone_number": dto.phone_number,
                }.items()
                if v is not None
            }
            if "email" in fields and repo.exists_by_email(fields["email"], exclude_id=owner.id):
                raise ConflictError(ENTITY, "Email already exists")

            try:
                repo.assign_updates(owner, fields, flush=False)
                if dto.vehicles is not None:
                    repo.replace_vehicles(owner, _vehicle_rows(dto.vehicles))
            except ValueError as exc:
                raise ValidationFailedError(errors=[str(exc)]) from exc

            try:
                repo.flush()
            except IntegrityError as exc:
                raise _conflict_from(exc) from exc
            return self._to_out(owner)

    def deactivate(self, owner_id: str) -> None:
        """Block login and refresh for the account (idempotent)."""
        self.ensure_owner_or_back_office(owner_id)
        with self.rw_uow() as uow:
            owner = uow.owners.get(owner_id)
            if owner is None:
                raise NotFoundError(ENTITY, owner_id)
            owner.is_active = False
        self._close_sessions(owner_id)
        log.info("owner deactivated", extra={"event": "owner.deactivate", "owner_id": owner_id})

    def reactivate(self, owner_id: str) -> None:
        """
        Re-enable an inactive account (back-office only).

        :raises NotFoundError: Account missing or already active.
        """
        self.ensure_back_office()
        with self.rw_uow() as uow:
            owner = uow.owners.get(owner_id)
            if owner is None or owner.is_active:
                raise NotFoundError(ENTITY, owner_id, "EV Owner not found or already active")
            owner.is_active = True
        log.info("owner reactivated", extra={"event": "owner.reactivate", "owner_id": owner_id})

    def delete(self, owner_id: str) -> None:
        """Hard-delete the account and its vehicles."""
        self.ensure_owner_or_back_office(owner_id)
        with self.rw_uow() as uow:
            repo: OwnerRepository = uow.owners
            owner = repo.get(owner_id)
            if owner is None:
                raise NotFoundError(ENTITY, owner_id)
            repo.delete(owner)
        self._close_sessions(owner_id)
        log.info("owner deleted", extra={"event": "owner.delete", "owner_id": owner_id})

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    def _close_sessions(self, owner_id: str) -> None:
        if self.sessions is None:
            return
        for s in self.sessions.list_owner_sessions(owner_id):
            if s.is_active:
                self.sessions.deactivate(s.id)

    @staticmethod
    def _to_out(owner: EVOwner) -> OwnerOut:
        return OwnerOut(
            id=owner.id,
            nic=owner.nic,
            first_name=owner.first_name,
            last_name=owner.last_name,
            email=owner.email,
            phone_number=owner.phone_number,
            is_active=owner.is_active,
            last_login=owner.last_login,
            created_at=owner.created_at,
            updated_at=owner.updated_at,
            vehicles=[
                VehicleData(
                    make=v.make,
                    model=v.model,
                    license_plate=v.license_plate,
                    year=v.year,
                )
                for v in owner.vehicles
            ],
        )


def _vehicle_rows(vehicles: Iterable[VehicleData]) -> list[dict]:
    return [
        {"make": v.make, "model": v.model, "license_plate": v.license_plate, "year": v.year}
        for v in vehicles
    ]


def _conflict_from(exc: IntegrityError) -> ConflictError:
    if violates(exc, "uq_ev_owners_email"):
        return ConflictError(ENTITY, "Email already exists")
    return ConflictError(ENTITY, "NIC already exists")
