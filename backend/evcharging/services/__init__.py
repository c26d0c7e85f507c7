"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`evcharging.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``evcharging.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Shared DTOs (from ``evcharging.services._shared.dto``)
    * :class:`PaginationIn`
    * :class:`PageMeta`

- Auth service (from ``evcharging.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`LogoutIn`,
      :class:`TokenPairOut`, :class:`AuthTokenConfig`

- Owner service (from ``evcharging.services.owners``)
    * :class:`OwnerService`
    * DTOs: :class:`OwnerRegisterIn`, :class:`OwnerUpdateIn`,
      :class:`OwnerListIn`, :class:`OwnerOut`, :class:`OwnerListOut`,
      :class:`VehicleData`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext

# Shared DTOs (compose these in endpoint-specific DTOs)
from ._shared.dto import PageMeta, PaginationIn

# Auth service + DTOs
from .auth.dto import AuthTokenConfig, LoginIn, LogoutIn, RefreshIn, TokenPairOut
from .auth.service import AuthService

# Owner service + DTOs
from .owners.dto import (
    OwnerListIn,
    OwnerListOut,
    OwnerOut,
    OwnerRegisterIn,
    OwnerUpdateIn,
    VehicleData,
)
from .owners.service import OwnerService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Shared DTOs
    "PaginationIn",
    "PageMeta",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "TokenPairOut",
    # Owners
    "OwnerService",
    "OwnerRegisterIn",
    "OwnerUpdateIn",
    "OwnerListIn",
    "OwnerOut",
    "OwnerListOut",
    "VehicleData",
]
