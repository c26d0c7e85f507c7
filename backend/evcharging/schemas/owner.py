"""EV owner resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

VEHICLE_MIN_YEAR = 1900
VEHICLE_MAX_YEAR = 2100


class VehicleSchema(Schema):
    """A vehicle, used for both input and output."""

    make = fields.String(required=True, validate=validate.Length(min=1, max=60))
    model = fields.String(required=True, validate=validate.Length(min=1, max=60))
    license_plate = fields.String(required=True, validate=validate.Length(min=1, max=20))
    year = fields.Integer(
        required=True, validate=validate.Range(min=VEHICLE_MIN_YEAR, max=VEHICLE_MAX_YEAR)
    )


class OwnerRegisterSchema(Schema):
    """Payload for public self-registration.

    NIC format and password strength are business rules checked by the service,
    which reports them with their own messages.
    """

    nic = fields.String(required=True, validate=validate.Length(min=1, max=20))
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    phone_number = fields.String(required=True, validate=validate.Length(min=1, max=32))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    vehicles = fields.List(fields.Nested(VehicleSchema), load_default=list)


class OwnerUpdateSchema(Schema):
    """Partial profile update. The NIC is immutable and rejected as unknown."""

    first_name = fields.String(validate=validate.Length(min=1, max=100))
    last_name = fields.String(validate=validate.Length(min=1, max=100))
    email = fields.Email(validate=validate.Length(max=254))
    phone_number = fields.String(validate=validate.Length(min=1, max=32))
    vehicles = fields.List(fields.Nested(VehicleSchema))


class OwnerFilterSchema(Schema):
    """Supported query parameters for listing owners."""

    class Meta:
        unknown = EXCLUDE

    is_active = fields.Boolean(load_default=None, allow_none=True)


class OwnerSchema(Schema):
    """Public representation of an owner account (never the password hash)."""

    id = fields.String(required=True)
    nic = fields.String(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    email = fields.Email(required=True)
    phone_number = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    last_login = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    vehicles = fields.List(fields.Nested(VehicleSchema))
