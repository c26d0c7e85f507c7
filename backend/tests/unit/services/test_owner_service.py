"""Unit tests for OwnerService."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from evcharging.core.security import PASSWORD_POLICY_MESSAGE
from evcharging.services._shared.base import ServiceContext
from evcharging.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from evcharging.services._shared.policies.common import BACK_OFFICE, EV_OWNER
from evcharging.services._shared.ports import InMemorySessionStore
from evcharging.services.owners.dto import (
    OwnerListIn,
    OwnerRegisterIn,
    OwnerUpdateIn,
    VehicleData,
)
from evcharging.services.owners.service import OwnerService
from tests.factories.owner import EVOwnerFactory

BACK_OFFICE_CTX = ServiceContext(actor_id="bo-1", role=BACK_OFFICE)


def _owner_ctx(owner) -> ServiceContext:
    return ServiceContext(actor_id=owner.id, role=EV_OWNER, nic=owner.nic)


def _register_in(**overrides) -> OwnerRegisterIn:
    data = {
        "nic": "123456789v",
        "first_name": "Nimal",
        "last_name": "Perera",
        "email": "Nimal@Example.com",
        "phone_number": "+94771234567",
        "password": "Abc12345!",
        "vehicles": (VehicleData("Nissan", "Leaf", "cab-1234", 2021),),
    }
    data.update(overrides)
    return OwnerRegisterIn(**data)


class TestRegister:
    def test_register_creates_active_owner(self, session):
        out = OwnerService().register(_register_in())

        assert out.nic == "123456789V"
        assert out.email == "nimal@example.com"
        assert out.is_active is True
        assert out.vehicles == [VehicleData("Nissan", "Leaf", "CAB-1234", 2021)]
        assert not hasattr(out, "password_hash")

    def test_short_nic_is_rejected(self, session):
        with pytest.raises(ValidationFailedError) as exc:
            OwnerService().register(_register_in(nic="12345"))
        assert str(exc.value) == "Invalid NIC format"

    def test_duplicate_nic(self, session):
        EVOwnerFactory(nic="123456789V")
        with pytest.raises(ConflictError) as exc:
            OwnerService().register(_register_in())
        assert str(exc.value) == "NIC already exists"

    def test_duplicate_email(self, session):
        EVOwnerFactory(email="nimal@example.com")
        with pytest.raises(ConflictError) as exc:
            OwnerService().register(_register_in())
        assert str(exc.value) == "Email already exists"

    def test_weak_password(self, session):
        with pytest.raises(ValidationFailedError) as exc:
            OwnerService().register(_register_in(password="abc"))
        assert str(exc.value) == PASSWORD_POLICY_MESSAGE
        assert exc.value.errors

    def test_stored_password_is_hashed(self, session):
        from evcharging.models import EVOwner

        OwnerService().register(_register_in())
        stored = session.query(EVOwner).one()
        assert stored.password_hash != "Abc12345!"
        assert stored.verify_password("Abc12345!")


class TestReads:
    def test_owner_reads_self(self, session):
        owner = EVOwnerFactory()
        out = OwnerService(ctx=_owner_ctx(owner)).get(owner.id)
        assert out.id == owner.id

    def test_owner_cannot_read_other(self, session):
        me, other = EVOwnerFactory(), EVOwnerFactory()
        with pytest.raises(AuthorizationError):
            OwnerService(ctx=_owner_ctx(me)).get(other.id)

    def test_authorization_precedes_existence(self, session):
        me = EVOwnerFactory()
        with pytest.raises(AuthorizationError):
            OwnerService(ctx=_owner_ctx(me)).get("does-not-exist")

    def test_back_office_missing_owner(self, session):
        with pytest.raises(NotFoundError) as exc:
            OwnerService(ctx=BACK_OFFICE_CTX).get("does-not-exist")
        assert str(exc.value) == "EV Owner not found"

    def test_get_by_nic(self, session):
        owner = EVOwnerFactory(nic="123456789V")

        assert OwnerService(ctx=_owner_ctx(owner)).get_by_nic("123456789v").id == owner.id
        assert OwnerService(ctx=BACK_OFFICE_CTX).get_by_nic("123456789V").id == owner.id
        with pytest.raises(AuthorizationError):
            OwnerService(ctx=_owner_ctx(EVOwnerFactory())).get_by_nic("123456789V")

    def test_list_owners_requires_back_office(self, session):
        owner = EVOwnerFactory()
        with pytest.raises(AuthorizationError):
            OwnerService(ctx=_owner_ctx(owner)).list_owners(OwnerListIn())

    def test_list_owners_paginates(self, session):
        for _ in range(3):
            EVOwnerFactory()
        EVOwnerFactory(is_active=False)

        result = OwnerService(ctx=BACK_OFFICE_CTX).list_owners(
            OwnerListIn(page=1, limit=2, is_active=True)
        )
        assert len(result.items) == 2
        assert result.meta.total == 3
        assert result.meta.has_next is True
        assert result.meta.has_prev is False

    def test_list_deactivated(self, session):
        EVOwnerFactory()
        inactive = EVOwnerFactory(is_active=False)

        out = OwnerService(ctx=BACK_OFFICE_CTX).list_deactivated()
        assert [o.id for o in out] == [inactive.id]


class TestWrites:
    def test_update_profile_and_vehicles(self, session):
        owner = EVOwnerFactory()
        out = OwnerService(ctx=_owner_ctx(owner)).update(
            OwnerUpdateIn(
                owner_id=owner.id,
                first_name="Kamal",
                vehicles=(VehicleData("BYD", "Dolphin", "cbc-7777", 2024),),
            )
        )
        assert out.first_name == "Kamal"
        assert out.nic == owner.nic
        assert [v.license_plate for v in out.vehicles] == ["CBC-7777"]

    def test_update_email_conflict(self, session):
        EVOwnerFactory(email="taken@example.com")
        owner = EVOwnerFactory()
        with pytest.raises(ConflictError) as exc:
            OwnerService(ctx=_owner_ctx(owner)).update(
                OwnerUpdateIn(owner_id=owner.id, email="TAKEN@example.com")
            )
        assert str(exc.value) == "Email already exists"

    def test_update_keeps_own_email(self, session):
        owner = EVOwnerFactory(email="me@example.com")
        out = OwnerService(ctx=_owner_ctx(owner)).update(
            OwnerUpdateIn(owner_id=owner.id, email="me@example.com", last_name="Silva")
        )
        assert out.last_name == "Silva"

    def test_deactivate_is_idempotent_and_closes_sessions(self, session):
        owner = EVOwnerFactory()
        store = InMemorySessionStore()
        live = store.create(
            owner_id=owner.id,
            user_type=EV_OWNER,
            refresh_token="rt-1",
            expires_at=datetime.now(UTC) + timedelta(days=7),
        )
        service = OwnerService(ctx=_owner_ctx(owner), session_store=store)

        service.deactivate(owner.id)
        service.deactivate(owner.id)

        assert store.get(live.id).is_active is False
        session.refresh(owner)
        assert owner.is_active is False

    def test_reactivate(self, session):
        owner = EVOwnerFactory(is_active=False)
        service = OwnerService(ctx=BACK_OFFICE_CTX)

        service.reactivate(owner.id)
        session.refresh(owner)
        assert owner.is_active is True

        with pytest.raises(NotFoundError) as exc:
            service.reactivate(owner.id)
        assert str(exc.value) == "EV Owner not found or already active"

    def test_owner_cannot_reactivate(self, session):
        owner = EVOwnerFactory(is_active=False)
        with pytest.raises(AuthorizationError):
            OwnerService(ctx=_owner_ctx(owner)).reactivate(owner.id)

    def test_delete_removes_owner(self, session):
        owner = EVOwnerFactory()
        owner_id = owner.id
        service = OwnerService(ctx=BACK_OFFICE_CTX, session_store=InMemorySessionStore())

        service.delete(owner_id)

        with pytest.raises(NotFoundError):
            service.get(owner_id)
        with pytest.raises(NotFoundError):
            service.delete(owner_id)
