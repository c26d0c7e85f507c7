"""Owner repository for account lookups and safe updates."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, cast

from sqlalchemy import select

from evcharging.models.owner import EVOwner, Vehicle
from evcharging.repositories.base import BaseRepository


def normalize_nic(nic: str) -> str:
    """Return the canonical (trimmed, upper-cased) form of a NIC."""
    return (nic or "").strip().upper()


class OwnerRepository(BaseRepository[EVOwner]):
    """Persistence-only repository for :class:`EVOwner`.

    It never issues tokens or touches sessions.
    """

    model = EVOwner

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "nic": EVOwner.nic,
            "email": EVOwner.email,
            "first_name": EVOwner.first_name,
            "last_name": EVOwner.last_name,
            "created_at": EVOwner.created_at,
            "last_login": EVOwner.last_login,
        }

    def _filterable_fields(self):
        return {
            "is_active": EVOwner.is_active,
            "nic": EVOwner.nic,
            "email": EVOwner.email,
        }

    def _updatable_fields(self):
        """NIC, password and the activity flag are not mass-assignable."""
        return {"first_name", "last_name", "email", "phone_number"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_nic(self, nic: str, *, active_only: bool = False) -> EVOwner | None:
        """Fetch an owner by NIC (case-insensitive).

        :param nic: NIC to normalize and search.
        :type nic: str
        :param active_only: Restrict the match to active accounts.
        :type active_only: bool
        :returns: Owner or ``None``.
        :rtype: EVOwner | None
        """
        stmt = select(EVOwner).where(EVOwner.nic == normalize_nic(nic))
        if active_only:
            stmt = stmt.where(EVOwner.is_active.is_(True))
        return cast(EVOwner | None, self.session.execute(stmt).scalars().first())

    def exists_by_nic(self, nic: str) -> bool:
        stmt = select(EVOwner.id).where(EVOwner.nic == normalize_nic(nic))
        return self.session.execute(stmt).first() is not None

    def exists_by_email(self, email: str, *, exclude_id: str | None = None) -> bool:
        """Return ``True`` when another owner already uses ``email``.

        :param email: Email to normalize and search.
        :type email: str
        :param exclude_id: Owner id ignored by the check (the one being updated).
        :type exclude_id: str | None
        """
        stmt = select(EVOwner.id).where(EVOwner.email == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(EVOwner.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def list_by_activity(self, *, is_active: bool) -> list[EVOwner]:
        stmt = (
            select(EVOwner)
            .where(EVOwner.is_active.is_(is_active))
            .order_by(EVOwner.updated_at.asc(), EVOwner.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Vehicles ----------------------------

    def replace_vehicles(self, owner: EVOwner, vehicles: Iterable[Mapping[str, Any]]) -> None:
        """Replace the owner's vehicle collection (delete-orphan removes old rows)."""
        owner.vehicles = [
            Vehicle(
                make=v["make"],
                model=v["model"],
                license_plate=v["license_plate"],
                year=int(v["year"]),
            )
            for v in vehicles
        ]
