from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol

from evcharging.models.base import utcnow


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """A token value and its absolute expiry (UTC)."""

    token: str
    expires_at: datetime


def new_refresh_token() -> str:
    """Return a high-entropy, URL-safe opaque refresh-token value."""
    return secrets.token_urlsafe(48)


class TokenIssuer(Protocol):
    """Port for issuing access tokens (signed) and refresh tokens (opaque)."""

    def issue_access_token(
        self,
        *,
        owner_id: str,
        user_type: str,
        role: str,
        nic: str | None = None,
    ) -> IssuedToken: ...

    def issue_refresh_token(self) -> IssuedToken: ...


class StubTokenIssuer(TokenIssuer):
    """Deterministic token issuer used in unit tests.

    Access tokens are readable strings; the claims are kept in ``issued``.
    """

    def __init__(
        self,
        *,
        access_expires: timedelta = timedelta(minutes=60),
        refresh_expires: timedelta = timedelta(days=7),
    ) -> None:
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self._seq = 0
        self.issued: dict[str, dict[str, Any]] = {}

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def issue_access_token(
        self,
        *,
        owner_id: str,
        user_type: str,
        role: str,
        nic: str | None = None,
    ) -> IssuedToken:
        seq = self._next()
        now = utcnow()
        token = f"access.{owner_id}.{seq}"
        claims: dict[str, Any] = {
            "sub": owner_id,
            "role": role,
            "user_type": user_type,
            "jti": f"jti-{seq}",
            "iat": int(now.timestamp()),
        }
        if nic:
            claims["nic"] = nic
        self.issued[token] = claims
        return IssuedToken(token=token, expires_at=now + self.access_expires)

    def issue_refresh_token(self) -> IssuedToken:
        seq = self._next()
        return IssuedToken(token=f"refresh-{seq}", expires_at=utcnow() + self.refresh_expires)
