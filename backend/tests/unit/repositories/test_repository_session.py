"""Unit tests for SessionRepository conditional writes."""

from __future__ import annotations

from datetime import timedelta

import pytest
from evcharging.models import AuthSession
from evcharging.repositories.session import SessionRepository
from sqlalchemy import select
from tests.helpers.utils import utc_in


def _by_token(session, token: str) -> AuthSession | None:
    stmt = (
        select(AuthSession)
        .where(AuthSession.refresh_token == token)
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).scalars().first()


class TestSessionRepository:
    @pytest.fixture()
    def repo(self, session):
        return SessionRepository()

    @pytest.fixture()
    def record(self, repo, session) -> AuthSession:
        s = repo.create(
            owner_id="owner-1",
            user_type="EVOwner",
            refresh_token="rt-1",
            expires_at=utc_in(days=7),
        )
        session.commit()
        return s

    def test_find_active_matches_only_live_sessions(self, repo, record):
        now = utc_in()
        assert repo.find_active("rt-1", now).id == record.id
        assert repo.find_active("unknown", now) is None
        assert repo.find_active("rt-1", now + timedelta(days=8)) is None

    def test_rotate_updates_in_place_once(self, repo, record, session):
        now = utc_in()
        new_expiry = now + timedelta(days=7, minutes=1)

        assert repo.rotate(old_token="rt-1", new_token="rt-2", new_expires_at=new_expiry, now=now)
        assert not repo.rotate(
            old_token="rt-1", new_token="rt-3", new_expires_at=new_expiry, now=now
        )
        session.commit()

        fetched = _by_token(session, "rt-2")
        assert fetched is not None
        assert fetched.id == record.id
        assert _by_token(session, "rt-1") is None
        assert session.query(AuthSession).count() == 1

    def test_rotate_refuses_expired_and_inactive(self, repo, record, session):
        now = utc_in()
        later = now + timedelta(days=8)
        assert not repo.rotate(
            old_token="rt-1", new_token="rt-2", new_expires_at=later, now=later
        )

        assert repo.deactivate_by_token("rt-1")
        assert not repo.rotate(old_token="rt-1", new_token="rt-2", new_expires_at=later, now=now)

    def test_deactivate_is_single_shot(self, repo, record, session):
        assert repo.deactivate(record.id)
        assert not repo.deactivate(record.id)
        assert not repo.deactivate_by_token("rt-1")
        session.commit()

        fetched = _by_token(session, "rt-1")
        assert fetched is not None
        assert fetched.is_active is False

    def test_list_for_owner(self, repo, record, session):
        repo.create(
            owner_id="owner-1",
            user_type="EVOwner",
            refresh_token="rt-b",
            expires_at=utc_in(days=7),
        )
        repo.create(
            owner_id="owner-2",
            user_type="EVOwner",
            refresh_token="rt-c",
            expires_at=utc_in(days=7),
        )
        session.commit()

        tokens = {s.refresh_token for s in repo.list_for_owner("owner-1")}
        assert tokens == {"rt-1", "rt-b"}

    def test_purge_stale_keeps_live_sessions(self, repo, record, session):
        repo.create(
            owner_id="owner-1",
            user_type="EVOwner",
            refresh_token="rt-closed",
            expires_at=utc_in(days=7),
        )
        session.commit()
        repo.deactivate_by_token("rt-closed")
        session.commit()

        removed = repo.purge_stale(utc_in(seconds=1))
        session.commit()

        assert removed == 1
        assert _by_token(session, "rt-closed") is None
        assert _by_token(session, "rt-1") is not None
