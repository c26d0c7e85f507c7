"""Server-side refresh session record."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from evcharging.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class AuthSession(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One record per login, mutated in place across its refresh chain.

    Rotation overwrites ``refresh_token``/``refresh_token_expiry``; logout flips
    ``is_active`` to ``False`` and keeps the row as an audit trail.

    Fields
    ------
    owner_id : str
        Account the session belongs to. No foreign key: the row outlives a
        deleted account and is invalidated on its next refresh.
    user_type : str
        Owner-type tag (``"EVOwner"``).
    refresh_token : str
        Current opaque refresh-token value. Unique.
    refresh_token_expiry : datetime
        Absolute expiry of ``refresh_token`` (UTC).
    is_active : bool
        ``False`` once logged out or invalidated.
    """

    __tablename__ = "auth_sessions"

    owner_id: Mapped[str] = mapped_column(String(32), nullable=False)
    user_type: Mapped[str] = mapped_column(String(32), nullable=False)
    refresh_token: Mapped[str] = mapped_column(String(128), nullable=False)
    refresh_token_expiry: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("refresh_token", name="uq_auth_sessions_refresh_token"),
        Index("ix_auth_sessions_owner_id", "owner_id"),
    )
