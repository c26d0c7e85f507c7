# evcharging/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param nic: Owner NIC (normalized by the repository).
    :type nic: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    nic: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh-token value read from its cookie.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Opaque refresh-token value of the session to close.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens plus their absolute expiries.

    The refresh token travels only in its cookie; the HTTP layer never
    serializes it into a JSON body.
    """

    owner_id: str
    user_type: str
    role: str
    access_token: str
    access_expires_at: datetime
    refresh_token: str
    refresh_expires_at: datetime


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration, read once at startup.

    :param issuer: ``iss`` claim value.
    :type issuer: str
    :param audience: ``aud`` claim value.
    :type audience: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    issuer: str
    audience: str
    access_expires: timedelta
    refresh_expires: timedelta

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """Build from a Flask config mapping (``JWT_*`` keys)."""
        return cls(
            issuer=str(config["JWT_ISSUER"]),
            audience=str(config["JWT_AUDIENCE"]),
            access_expires=timedelta(minutes=int(config["JWT_EXPIRATION_MINUTES"])),
            refresh_expires=timedelta(days=int(config["JWT_REFRESH_EXPIRATION_DAYS"])),
        )
