"""
Unit tests for RedisSessionStore using fakeredis.

They cover create/find, in-place rotation (success and reuse), both
deactivation paths, owner listings, expiry handling and writes that race a
second client between WATCH and EXEC, entirely in memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from evcharging.infra.redis.redis_session_store import RedisSessionStore


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    """Provide a RedisSessionStore backed by FakeRedis."""
    return RedisSessionStore(r=fake_redis)


def _create(store, token="rt-0", owner_id="owner-1", seconds=3600):
    return store.create(
        owner_id=owner_id,
        user_type="EVOwner",
        refresh_token=token,
        expires_at=_now() + timedelta(seconds=seconds),
    )


def test_create_and_find_active(store):
    view = _create(store)

    found = store.find_active("rt-0", now=_now())
    assert found is not None
    assert found.id == view.id
    assert found.owner_id == "owner-1"
    assert found.user_type == "EVOwner"
    assert found.is_active is True
    assert abs((found.expires_at - view.expires_at).total_seconds()) < 1e-3


def test_find_active_rejects_unknown_and_expired(store):
    _create(store, seconds=60)

    assert store.find_active("missing", now=_now()) is None
    assert store.find_active("rt-0", now=_now() + timedelta(seconds=61)) is None


def test_rotate_moves_token_on_same_record(store, fake_redis):
    view = _create(store)
    now = _now()

    assert store.rotate(
        old_token="rt-0", new_token="rt-1", new_expires_at=now + timedelta(hours=2), now=now
    )
    assert fake_redis.get("sess:rt:rt-0") is None
    assert fake_redis.get("sess:rt:rt-1") == view.id.encode()

    rotated = store.find_active("rt-1", now=now)
    assert rotated is not None
    assert rotated.id == view.id
    assert store.find_active("rt-0", now=now) is None


def test_rotate_reuse_and_expiry_fail(store):
    _create(store, seconds=60)
    now = _now()

    assert not store.rotate(
        old_token="rt-0",
        new_token="rt-x",
        new_expires_at=now + timedelta(hours=1),
        now=now + timedelta(seconds=61),
    )
    assert store.rotate(
        old_token="rt-0", new_token="rt-1", new_expires_at=now + timedelta(hours=1), now=now
    )
    assert not store.rotate(
        old_token="rt-0", new_token="rt-2", new_expires_at=now + timedelta(hours=1), now=now
    )


def test_deactivate_by_token_keeps_audit_record(store, fake_redis):
    view = _create(store)

    assert store.deactivate_by_token("rt-0")
    assert not store.deactivate_by_token("rt-0")
    assert fake_redis.get("sess:rt:rt-0") is None

    closed = store.get(view.id)
    assert closed is not None
    assert closed.is_active is False
    assert store.find_active("rt-0", now=_now()) is None


def test_deactivate_by_id(store):
    view = _create(store)

    assert store.deactivate(view.id)
    assert not store.deactivate(view.id)
    assert not store.deactivate("missing")
    assert not store.rotate(
        old_token="rt-0", new_token="rt-1", new_expires_at=_now() + timedelta(hours=1), now=_now()
    )


def test_list_owner_sessions_prunes_missing_hashes(store, fake_redis):
    a = _create(store, token="a")
    b = _create(store, token="b")
    _create(store, token="c", owner_id="owner-2")
    fake_redis.delete(f"sess:{b.id}")

    sessions = store.list_owner_sessions("owner-1")

    assert [s.id for s in sessions] == [a.id]
    assert fake_redis.smembers("sess:o:owner-1") == {a.id.encode()}


class TestConcurrentWrites:
    """A second client commits between WATCH and EXEC; exactly one write wins."""

    @pytest.fixture
    def server(self):
        return fakeredis.FakeServer()

    @pytest.fixture
    def store(self, server):
        return RedisSessionStore(r=fakeredis.FakeRedis(server=server))

    @pytest.fixture
    def rival(self, server):
        return RedisSessionStore(r=fakeredis.FakeRedis(server=server))

    @staticmethod
    def _interleave(monkeypatch, action):
        """Run ``action`` once, inside the first transaction that stamps ``updated_at``."""
        import evcharging.infra.redis.redis_session_store as module

        original = module.utcnow
        fired: list[bool] = []

        def hooked():
            if not fired:
                fired.append(True)
                action()
            return original()

        monkeypatch.setattr(module, "utcnow", hooked)
        return fired

    def test_rotation_loses_to_concurrent_rotation(self, store, rival, monkeypatch):
        view = _create(store)
        rival_won: list[bool] = []
        fired = self._interleave(
            monkeypatch,
            lambda: rival_won.append(
                rival.rotate(
                    old_token="rt-0",
                    new_token="rt-rival",
                    new_expires_at=_now() + timedelta(hours=2),
                    now=_now(),
                )
            ),
        )

        won = store.rotate(
            old_token="rt-0",
            new_token="rt-mine",
            new_expires_at=_now() + timedelta(hours=2),
            now=_now(),
        )

        assert fired == [True]
        assert rival_won == [True]
        assert won is False
        assert store.find_active("rt-mine", now=_now()) is None
        assert store.find_active("rt-rival", now=_now()).id == view.id
        assert store.r.get("sess:rt:rt-mine") is None

    def test_deactivate_by_id_retries_after_concurrent_rotation(self, store, rival, monkeypatch):
        view = _create(store)
        self._interleave(
            monkeypatch,
            lambda: rival.rotate(
                old_token="rt-0",
                new_token="rt-1",
                new_expires_at=_now() + timedelta(hours=2),
                now=_now(),
            ),
        )

        assert store.deactivate(view.id) is True

        closed = store.get(view.id)
        assert closed.is_active is False
        assert closed.refresh_token == "rt-1"
        assert store.find_active("rt-1", now=_now()) is None
        assert store.r.get("sess:rt:rt-1") is None

    def test_deactivate_by_token_loses_to_concurrent_rotation(self, store, rival, monkeypatch):
        view = _create(store)
        self._interleave(
            monkeypatch,
            lambda: rival.rotate(
                old_token="rt-0",
                new_token="rt-1",
                new_expires_at=_now() + timedelta(hours=2),
                now=_now(),
            ),
        )

        assert store.deactivate_by_token("rt-0") is False
        assert store.find_active("rt-1", now=_now()).id == view.id
