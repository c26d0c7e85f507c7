"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest
from evcharging.models import EVOwner
from evcharging.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork, UnitOfWork
from tests.factories.owner import EVOwnerFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, db, session):
        """
        GIVEN a writer UoW
        WHEN we create an owner via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(EVOwner).count()

        with SQLAlchemyUnitOfWork() as uow:
            owner = EVOwnerFactory.build()  # build = no persist
            uow.owners.add(owner)

        after = db.session.query(EVOwner).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(EVOwner).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            owner = EVOwnerFactory.build()
            uow.owners.add(owner)
            raise RuntimeError("boom")

        after = db.session.query(EVOwner).count()
        assert after == initial

    def test_repositories_share_the_session(self, db):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.owners.session is uow.sessions.session

    @pytest.mark.parametrize("uow_cls", [SQLAlchemyUnitOfWork, SQLAlchemyReadOnlyUnitOfWork])
    def test_both_variants_satisfy_the_contract(self, db, uow_cls):
        with uow_cls() as uow:
            assert isinstance(uow, UnitOfWork)
