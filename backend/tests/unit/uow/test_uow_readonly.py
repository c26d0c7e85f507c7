import pytest
from evcharging.models import EVOwner
from evcharging.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from evcharging.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.owner import EVOwnerFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, db, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            # Add a transient object; any flush must be blocked.
            owner = EVOwnerFactory.build()
            uow.session.add(owner)
            uow.session.flush()

    def test_allows_reads(self, db, session):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow() as uow:
            uow.owners.add(EVOwnerFactory.build())

        with ROuow() as uow:
            assert uow.session.query(EVOwner).count() == 1

    def test_disallows_commit(self, db):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, db, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        owner = EVOwnerFactory(email="kept@example.com")
        owner_id = owner.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            o = uow.session.get(EVOwner, owner_id)
            o.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            persisted = uow.owners.get(owner_id)
            assert persisted.email == "kept@example.com"

    def test_guard_is_removed_on_exit(self, db, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.owners.add(EVOwnerFactory.build())
        assert db.session.query(EVOwner).count() == 1
