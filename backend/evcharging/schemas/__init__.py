"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthSessionSchema, LoginSchema
from .common import MetaSchema, PaginationQuerySchema, SortQuerySchema
from .owner import (
    OwnerFilterSchema,
    OwnerRegisterSchema,
    OwnerSchema,
    OwnerUpdateSchema,
    VehicleSchema,
)

__all__ = [
    "AuthSessionSchema",
    "LoginSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "MetaSchema",
    "OwnerFilterSchema",
    "OwnerRegisterSchema",
    "OwnerSchema",
    "OwnerUpdateSchema",
    "VehicleSchema",
]
