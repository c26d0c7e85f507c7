# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import redis  # type: ignore[import-untyped]

from evcharging.models.base import as_utc, utcnow
from evcharging.services._shared.ports import SessionStore, SessionView

# Closed sessions stay readable for auditing this long past their expiry
AUDIT_RETENTION = timedelta(days=30)


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisSessionStore(SessionStore):
    """
    Redis-backed session store with atomic rotation.

    Layout
    ------
    - ``sess:{id}``: hash with the session fields (timestamps as epoch seconds).
    - ``sess:rt:{token}``: current refresh-token value → session id. Expires
      with the token.
    - ``sess:o:{owner_id}``: set of the owner's session ids.

    Rotation and deactivation use WATCH/MULTI/EXEC: if another client touches
    the watched keys between the check and the write, EXEC aborts and the
    state is re-read, so two callers holding the same token cannot both win.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(session_id: str) -> str:
        return f"sess:{session_id}"

    @staticmethod
    def _kt(token: str) -> str:
        return f"sess:rt:{token}"

    @staticmethod
    def _ko(owner_id: str) -> str:
        return f"sess:o:{owner_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        return as_utc(dt).timestamp()

    @staticmethod
    def _from_ts(raw: bytes | str | None) -> datetime:
        return datetime.fromtimestamp(float(_b(raw, "0")), tz=UTC)

    def _view(self, session_id: str, h: dict) -> SessionView:
        return SessionView(
            id=session_id,
            owner_id=_b(h.get(b"owner_id")),
            user_type=_b(h.get(b"user_type")),
            refresh_token=_b(h.get(b"refresh_token")),
            expires_at=self._from_ts(h.get(b"expires_at")),
            is_active=_b(h.get(b"is_active"), "0") == "1",
            created_at=self._from_ts(h.get(b"created_at")),
            updated_at=self._from_ts(h.get(b"updated_at")),
        )

    @staticmethod
    def _is_live(h: dict, token: str, now_ts: float) -> bool:
        return (
            bool(h)
            and _b(h.get(b"is_active"), "0") == "1"
            and _b(h.get(b"refresh_token")) == token
            and float(_b(h.get(b"expires_at"), "0")) > now_ts
        )

    # -------------------- API ------------------------

    def create(
        self,
        *,
        owner_id: str,
        user_type: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> SessionView:
        session_id = uuid4().hex
        now_ts = self._to_ts(utcnow())
        exp_ts = self._to_ts(expires_at)
        key = self._k(session_id)
        mapping = {
            "owner_id": owner_id,
            "user_type": user_type,
            "refresh_token": refresh_token,
            "expires_at": repr(exp_ts),
            "is_active": "1",
            "created_at": repr(now_ts),
            "updated_at": repr(now_ts),
        }

        with self.r.pipeline(transaction=True) as p:
            p.hset(key, mapping=mapping)
            p.expireat(key, int(exp_ts + AUDIT_RETENTION.total_seconds()))
            p.set(self._kt(refresh_token), session_id, exat=int(exp_ts) + 1)
            p.sadd(self._ko(owner_id), session_id)
            p.execute()

        return self._view(session_id, {k.encode(): v.encode() for k, v in mapping.items()})

    def find_active(self, refresh_token: str, *, now: datetime) -> SessionView | None:
        sid = self.r.get(self._kt(refresh_token))
        if not sid:
            return None
        session_id = _b(sid)
        h = self.r.hgetall(self._k(session_id))
        if not self._is_live(h, refresh_token, self._to_ts(now)):
            return None
        return self._view(session_id, h)

    def rotate(
        self,
        *,
        old_token: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """
        Swap ``old_token`` for ``new_token`` on the same session hash.

        :returns: ``False`` when the old token is unknown, inactive, expired
            or was rotated by a concurrent caller.
        """
        now_ts = self._to_ts(now)
        exp_ts = self._to_ts(new_expires_at)
        k_old = self._kt(old_token)

        # Retry loop for optimistic locking in case of concurrent modifications
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old)
                    sid = p.get(k_old)
                    if not sid:
                        p.unwatch()
                        return False
                    key = self._k(_b(sid))
                    p.watch(key)
                    h = p.hgetall(key)
                    if not self._is_live(h, old_token, now_ts):
                        p.unwatch()
                        return False

                    p.multi()
                    p.hset(
                        key,
                        mapping={
                            "refresh_token": new_token,
                            "expires_at": repr(exp_ts),
                            "updated_at": repr(self._to_ts(utcnow())),
                        },
                    )
                    p.expireat(key, int(exp_ts + AUDIT_RETENTION.total_seconds()))
                    p.delete(k_old)
                    p.set(self._kt(new_token), _b(sid), exat=int(exp_ts) + 1)
                    p.execute()
                return True
            except redis.WatchError:
                # Concurrent modification detected; re-check from scratch
                continue

    def deactivate_by_token(self, refresh_token: str) -> bool:
        sid = self.r.get(self._kt(refresh_token))
        if not sid:
            return False
        return self._deactivate(_b(sid), expect_token=refresh_token)

    def deactivate(self, session_id: str) -> bool:
        return self._deactivate(session_id)

    def _deactivate(self, session_id: str, *, expect_token: str | None = None) -> bool:
        key = self._k(session_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h or _b(h.get(b"is_active"), "0") != "1":
                        p.unwatch()
                        return False
                    token = _b(h.get(b"refresh_token"))
                    if expect_token is not None and token != expect_token:
                        p.unwatch()
                        return False

                    p.multi()
                    p.hset(
                        key,
                        mapping={"is_active": "0", "updated_at": repr(self._to_ts(utcnow()))},
                    )
                    p.delete(self._kt(token))
                    p.execute()
                return True
            except redis.WatchError:
                continue

    def get(self, session_id: str) -> SessionView | None:
        h = self.r.hgetall(self._k(session_id))
        if not h:
            return None
        return self._view(session_id, h)

    def list_owner_sessions(self, owner_id: str) -> list[SessionView]:
        key_o = self._ko(owner_id)
        members = sorted(_b(m) for m in self.r.smembers(key_o))

        views: list[SessionView] = []
        stale: list[str] = []
        for sid in members:
            v = self.get(sid)
            if v:
                views.append(v)
            else:
                # Underlying hash expired past retention
                stale.append(sid)

        if stale:
            self.r.srem(key_o, *stale)
        return sorted(views, key=lambda v: (v.created_at, v.id))
