"""Repository for refresh-session records."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select, update

from evcharging.models.base import utcnow
from evcharging.models.session import AuthSession
from evcharging.repositories.base import BaseRepository


class SessionRepository(BaseRepository[AuthSession]):
    """Persistence for :class:`AuthSession`.

    Every state transition that must not race (rotation, deactivation) is a
    single conditional ``UPDATE`` whose row count tells whether this caller won.
    """

    model = AuthSession

    # ---------------------------- Lookups ----------------------------

    def find_active(self, refresh_token: str, now: datetime) -> AuthSession | None:
        """Return the session matching ``refresh_token`` if active and unexpired."""
        stmt = select(AuthSession).where(
            AuthSession.refresh_token == refresh_token,
            AuthSession.is_active.is_(True),
            AuthSession.refresh_token_expiry > now,
        )
        return cast(AuthSession | None, self.session.execute(stmt).scalars().first())

    def list_for_owner(self, owner_id: str) -> list[AuthSession]:
        stmt = (
            select(AuthSession)
            .where(AuthSession.owner_id == owner_id)
            .order_by(AuthSession.created_at.asc(), AuthSession.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Writes ----------------------------

    def create(
        self,
        *,
        owner_id: str,
        user_type: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> AuthSession:
        return self.add(
            AuthSession(
                owner_id=owner_id,
                user_type=user_type,
                refresh_token=refresh_token,
                refresh_token_expiry=expires_at,
                is_active=True,
            )
        )

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Atomically swap ``old_token`` for ``new_token`` on the same record.

        :returns: ``True`` when exactly one active, unexpired row matched.
        :rtype: bool
        """
        stmt = (
            update(AuthSession)
            .where(
                AuthSession.refresh_token == old_token,
                AuthSession.is_active.is_(True),
                AuthSession.refresh_token_expiry > now,
            )
            .values(
                refresh_token=new_token,
                refresh_token_expiry=new_expires_at,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    def deactivate_by_token(self, refresh_token: str) -> bool:
        """Flip an active session to inactive; ``False`` when nothing matched."""
        stmt = (
            update(AuthSession)
            .where(
                AuthSession.refresh_token == refresh_token,
                AuthSession.is_active.is_(True),
            )
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1  # type: ignore[attr-defined]

    def deactivate(self, session_id: str) -> bool:
        stmt = (
            update(AuthSession)
            .where(AuthSession.id == session_id, AuthSession.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1  # type: ignore[attr-defined]

    def purge_stale(self, before: datetime) -> int:
        """Delete inactive or expired sessions last touched before ``before``.

        :returns: Number of deleted rows.
        :rtype: int
        """
        stmt = (
            delete(AuthSession)
            .where(
                or_(
                    AuthSession.is_active.is_(False),
                    AuthSession.refresh_token_expiry <= before,
                ),
                AuthSession.updated_at < before,
            )
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)  # type: ignore[attr-defined]
