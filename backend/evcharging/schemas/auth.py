"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating an owner."""

    nic = fields.String(required=True, validate=validate.Length(min=1, max=20))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class AuthSessionSchema(Schema):
    """Login/refresh response body.

    Only non-secret fields: both tokens travel exclusively in cookies.
    """

    owner_id = fields.String(required=True)
    user_type = fields.String(required=True)
    role = fields.String(required=True)
    access_expires_at = fields.AwareDateTime(required=True)
    refresh_expires_at = fields.AwareDateTime(required=True)
