"""EV owner account and vehicle models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from evcharging.core.extensions import db
from evcharging.core.security import password_hasher

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class EVOwner(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Electric-vehicle owner account.

    Fields
    ------
    nic : str
        National identity card number. Unique, immutable, stored upper-cased.
    first_name, last_name : str
        Display name.
    email : str
        Contact email. Unique, stored normalized (lowercase, trimmed).
    phone_number : str
        Contact phone number.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    is_active : bool
        ``False`` blocks login and refresh.
    last_login : datetime | None
        Timestamp of the most recent successful login.
    vehicles : list[Vehicle]
        Registered vehicles (unordered).
    """

    __tablename__ = "ev_owners"

    # Columns
    nic: Mapped[str] = mapped_column(String(20), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    vehicles: Mapped[list[Vehicle]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("nic", name="uq_ev_owners_nic"),
        UniqueConstraint("email", name="uq_ev_owners_email"),
        Index("ix_ev_owners_is_active", "is_active"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        self.password_hash = password_hasher.hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        return password_hasher.verify(raw, self.password_hash)

    # -------------------- Validators --------------------
    @validates("nic")
    def _normalize_nic(self, key: str, value: str) -> str:
        """
        Upper-case and trim the NIC; refuse changes once persisted.

        :raises ValueError: If the NIC is blank or an existing NIC is modified.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("NIC is required.")
        v = value.strip().upper()
        current = self.__dict__.get("nic")
        if current is None and inspect(self).has_identity:
            current = self.nic  # expired after commit; reload the stored value
        if current is not None and current != v:
            raise ValueError("NIC cannot be changed.")
        return v

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("first_name", "last_name", "phone_number")
    def _strip(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Vehicle(ReprMixin, db.Model):
    """A vehicle registered by an owner."""

    __tablename__ = "ev_owner_vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("ev_owners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    make: Mapped[str] = mapped_column(String(60), nullable=False)
    model: Mapped[str] = mapped_column(String(60), nullable=False)
    license_plate: Mapped[str] = mapped_column(String(20), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    owner: Mapped[EVOwner] = relationship(back_populates="vehicles")

    @validates("license_plate")
    def _normalize_plate(self, key: str, value: str) -> str:
        return value.strip().upper()
