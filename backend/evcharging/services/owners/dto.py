"""
DTOs for OwnerService.

Framework-agnostic contracts between the API layer and the application
service managing the ``EVOwner`` aggregate. Output DTOs never carry the
password hash.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from evcharging.services._shared.dto import PageMeta, PaginationIn

# --------------------------------------------------------------------------- #
# Shared
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class VehicleData:
    """
    A vehicle as submitted by clients and returned to them.

    :param make: Manufacturer.
    :param model: Model name.
    :param license_plate: Plate number (stored upper-cased).
    :param year: Model year.
    """

    make: str
    model: str
    license_plate: str
    year: int


# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class OwnerRegisterIn:
    """
    Input DTO for self-registration.

    :param nic: National identity card number (upper-cased on save).
    :type nic: str
    :param password: Raw password, checked against the password policy.
    :type password: str
    """

    nic: str
    first_name: str
    last_name: str
    email: str
    phone_number: str
    password: str
    vehicles: tuple[VehicleData, ...] = ()


@dataclass(frozen=True, slots=True)
class OwnerUpdateIn:
    """
    Input DTO for profile updates. ``None`` leaves a field unchanged.

    The NIC is not part of this contract: it is immutable.

    :param owner_id: Target account id.
    :type owner_id: str
    :param vehicles: Replacement vehicle list (``None`` keeps the current one).
    :type vehicles: tuple[VehicleData, ...] | None
    """

    owner_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    vehicles: tuple[VehicleData, ...] | None = None


@dataclass(frozen=True, slots=True)
class OwnerListIn(PaginationIn):
    """
    Input DTO for listing owners.

    :param is_active: Optional activity filter.
    :type is_active: bool | None
    """

    is_active: bool | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class OwnerOut:
    """Public representation of an owner account."""

    id: str
    nic: str
    first_name: str
    last_name: str
    email: str
    phone_number: str
    is_active: bool
    last_login: datetime | None
    created_at: datetime
    updated_at: datetime
    vehicles: list[VehicleData] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class OwnerListOut:
    """
    Output DTO for paginated lists of owners.

    :param items: Owners on the requested page.
    :type items: list[OwnerOut]
    :param meta: Pagination metadata.
    :type meta: PageMeta
    """

    items: list[OwnerOut]
    meta: PageMeta
