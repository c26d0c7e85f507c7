from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from uuid import uuid4

from evcharging.models.base import as_utc, utcnow


@dataclass(frozen=True, slots=True)
class SessionView:
    """
    Read-model for a refresh session.

    :ivar id: Session record id (stable across rotations).
    :ivar owner_id: Owning account id.
    :ivar user_type: Owner-type tag (``"EVOwner"``).
    :ivar refresh_token: Current refresh-token value.
    :ivar expires_at: Absolute refresh expiry (UTC).
    :ivar is_active: ``False`` once logged out or invalidated.
    :ivar created_at: Login time (UTC).
    :ivar updated_at: Last rotation or deactivation (UTC).
    """

    id: str
    owner_id: str
    user_type: str
    refresh_token: str
    expires_at: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SessionStore(Protocol):
    """
    Stateful store for refresh sessions.

    ``rotate`` and ``deactivate_by_token`` MUST be single atomic match-and-mutate
    operations: of two callers presenting the same token, only one may win.
    """

    def create(
        self,
        *,
        owner_id: str,
        user_type: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> SessionView:
        """Persist a new active session for a successful login."""

    def find_active(self, refresh_token: str, *, now: datetime) -> SessionView | None:
        """Return the session carrying ``refresh_token`` if active and unexpired."""

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Overwrite ``old_token`` with ``new_token`` on the same session record.

        :returns: ``True`` only when an active, unexpired session matched.
        """

    def deactivate_by_token(self, refresh_token: str) -> bool:
        """Flip the active session carrying ``refresh_token``. :returns: True if one matched."""

    def deactivate(self, session_id: str) -> bool:
        """Flip a session by id. :returns: True if it was active."""

    def get(self, session_id: str) -> SessionView | None:
        """Fetch a single session snapshot (if present)."""

    def list_owner_sessions(self, owner_id: str) -> list[SessionView]:
        """List every session (active or not) recorded for an owner."""


class InMemorySessionStore(SessionStore):
    """
    In-memory session store with atomic rotation behavior.

    .. note::
       Uses a threading lock to provide the match-and-mutate guarantee in unit tests.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, SessionView] = {}
        self._by_token: dict[str, str] = {}
        self._lock = threading.Lock()

    # -------------------------- API ----------------------------

    def create(
        self,
        *,
        owner_id: str,
        user_type: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> SessionView:
        now = utcnow()
        view = SessionView(
            id=uuid4().hex,
            owner_id=owner_id,
            user_type=user_type,
            refresh_token=refresh_token,
            expires_at=as_utc(expires_at),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if refresh_token in self._by_token:
                raise ValueError("Refresh token already registered")
            self._by_id[view.id] = view
            self._by_token[refresh_token] = view.id
        return view

    def _match_active(self, refresh_token: str, now: datetime) -> SessionView | None:
        sid = self._by_token.get(refresh_token)
        s = self._by_id.get(sid) if sid else None
        if s is None or not s.is_active or s.expires_at <= as_utc(now):
            return None
        return s

    def find_active(self, refresh_token: str, *, now: datetime) -> SessionView | None:
        with self._lock:
            return self._match_active(refresh_token, now)

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        with self._lock:
            s = self._match_active(old_token, now)
            if s is None:
                return False
            self._by_id[s.id] = replace(
                s,
                refresh_token=new_token,
                expires_at=as_utc(new_expires_at),
                updated_at=utcnow(),
            )
            del self._by_token[old_token]
            self._by_token[new_token] = s.id
            return True

    def deactivate_by_token(self, refresh_token: str) -> bool:
        with self._lock:
            sid = self._by_token.get(refresh_token)
            if not sid:
                return False
            return self._deactivate_locked(sid)

    def deactivate(self, session_id: str) -> bool:
        with self._lock:
            return self._deactivate_locked(session_id)

    def _deactivate_locked(self, session_id: str) -> bool:
        s = self._by_id.get(session_id)
        if s is None or not s.is_active:
            return False
        self._by_id[session_id] = replace(s, is_active=False, updated_at=utcnow())
        return True

    def get(self, session_id: str) -> SessionView | None:
        with self._lock:
            return self._by_id.get(session_id)

    def list_owner_sessions(self, owner_id: str) -> list[SessionView]:
        with self._lock:
            items = [s for s in self._by_id.values() if s.owner_id == owner_id]
        return sorted(items, key=lambda s: (s.created_at, s.id))
