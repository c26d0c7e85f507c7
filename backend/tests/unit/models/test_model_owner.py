"""Unit tests for the EVOwner and AuthSession models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from evcharging.models import AuthSession, EVOwner
from evcharging.models.base import as_utc
from tests.factories.owner import EVOwnerFactory, VehicleFactory


class TestEVOwnerModel:
    def test_normalizes_nic_and_email(self, session):
        owner = EVOwnerFactory(nic="  123456789v ", email="  Nimal@Example.COM ")

        assert owner.nic == "123456789V"
        assert owner.email == "nimal@example.com"
        assert len(owner.id) == 32

    def test_password_is_write_only_and_hashed(self, session):
        owner = EVOwnerFactory(password="Xyz98765$")

        assert owner.password_hash != "Xyz98765$"
        assert owner.verify_password("Xyz98765$")
        assert not owner.verify_password("Abc12345!")
        with pytest.raises(AttributeError):
            _ = owner.password

    def test_nic_cannot_change_once_set(self, session):
        owner = EVOwnerFactory(nic="123456789V")
        with pytest.raises(ValueError, match="NIC cannot be changed"):
            owner.nic = "987654321V"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
    def test_rejects_malformed_email(self, email):
        with pytest.raises(ValueError):
            EVOwner(email=email)

    def test_vehicles_cascade_with_owner(self, session):
        vehicle = VehicleFactory(license_plate="wp-cab-1234")
        owner = vehicle.owner

        assert vehicle.license_plate == "WP-CAB-1234"
        assert [v.id for v in owner.vehicles] == [vehicle.id]

        session.delete(owner)
        session.commit()
        assert session.query(EVOwner).count() == 0
        assert session.query(type(vehicle)).count() == 0


class TestAuthSessionModel:
    def test_defaults_and_timestamps(self, session):
        expires = datetime.now(UTC) + timedelta(days=7)
        record = AuthSession(
            owner_id="owner-1",
            user_type="EVOwner",
            refresh_token="rt-1",
            refresh_token_expiry=expires,
        )
        session.add(record)
        session.commit()

        assert record.is_active is True
        assert as_utc(record.refresh_token_expiry) == expires
        assert record.created_at is not None
        assert record.updated_at is not None


def test_as_utc_labels_naive_values():
    naive = datetime(2026, 1, 1, 12, 0, 0)
    assert as_utc(naive) == datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
    assert as_utc(None) is None
