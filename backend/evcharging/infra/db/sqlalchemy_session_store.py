# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from evcharging.models.base import as_utc
from evcharging.models.session import AuthSession
from evcharging.services._shared.ports import SessionStore, SessionView
from evcharging.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _view(s: AuthSession) -> SessionView:
    return SessionView(
        id=s.id,
        owner_id=s.owner_id,
        user_type=s.user_type,
        refresh_token=s.refresh_token,
        expires_at=as_utc(s.refresh_token_expiry),
        is_active=bool(s.is_active),
        created_at=as_utc(s.created_at),
        updated_at=as_utc(s.updated_at),
    )


@dataclass(slots=True)
class SQLAlchemySessionStore(SessionStore):
    """
    Relational session store (default backend).

    Each call runs in its own unit of work and commits before returning.
    Rotation and deactivation are single conditional ``UPDATE`` statements,
    so the database arbitrates concurrent callers.

    .. note::
       Requires an active Flask app context. Must not be called while the
       caller holds an open unit of work on the same scoped session.
    """

    def create(
        self,
        *,
        owner_id: str,
        user_type: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> SessionView:
        with SQLAlchemyUnitOfWork() as uow:
            s = uow.sessions.create(
                owner_id=owner_id,
                user_type=user_type,
                refresh_token=refresh_token,
                expires_at=expires_at,
            )
            return _view(s)

    def find_active(self, refresh_token: str, *, now: datetime) -> SessionView | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            s = uow.sessions.find_active(refresh_token, now)
            return _view(s) if s is not None else None

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.sessions.rotate(
                old_token=old_token,
                new_token=new_token,
                new_expires_at=new_expires_at,
                now=now,
            )

    def deactivate_by_token(self, refresh_token: str) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.sessions.deactivate_by_token(refresh_token)

    def deactivate(self, session_id: str) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.sessions.deactivate(session_id)

    def get(self, session_id: str) -> SessionView | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            s = uow.sessions.get(session_id)
            return _view(s) if s is not None else None

    def list_owner_sessions(self, owner_id: str) -> list[SessionView]:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            return [_view(s) for s in uow.sessions.list_for_owner(owner_id)]

    def purge_stale(self, before: datetime) -> int:
        """Delete closed or expired sessions untouched since ``before``."""
        with SQLAlchemyUnitOfWork() as uow:
            return uow.sessions.purge_stale(before)
