# evcharging/infra/jwt/flask_jwt_token_issuer.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast

from evcharging.models.base import utcnow
from evcharging.services._shared.ports import IssuedToken, TokenIssuer, new_refresh_token
from evcharging.services.auth.dto import AuthTokenConfig


@dataclass(slots=True)
class JWTTokenIssuer(TokenIssuer):
    """
    Adapter for Flask-JWT-Extended.

    Access tokens are HS256 JWTs carrying ``sub``, ``role``, ``user_type``,
    optional ``nic`` and the library's ``jti``/``iat``/``type`` claims.
    Refresh tokens are opaque random strings, never JWTs.

    .. note::
       Requires an active Flask app context; the signing key is
       ``JWT_SECRET_KEY``.
    """

    cfg: AuthTokenConfig

    def issue_access_token(
        self,
        *,
        owner_id: str,
        user_type: str,
        role: str,
        nic: str | None = None,
    ) -> IssuedToken:
        from flask_jwt_extended import create_access_token as _create_access

        # exp has one-second resolution; pin it so the cookie and claim agree
        exp = int((utcnow() + self.cfg.access_expires).timestamp())
        claims: dict[str, Any] = {
            "role": role,
            "user_type": user_type,
            "iss": self.cfg.issuer,
            "aud": self.cfg.audience,
            "exp": exp,
        }
        if nic:
            claims["nic"] = nic

        token = cast(
            str,
            _create_access(
                identity=str(owner_id),
                additional_claims=claims,
                expires_delta=self.cfg.access_expires,
            ),
        )
        return IssuedToken(token=token, expires_at=datetime.fromtimestamp(exp, tz=UTC))

    def issue_refresh_token(self) -> IssuedToken:
        return IssuedToken(
            token=new_refresh_token(),
            expires_at=utcnow() + self.cfg.refresh_expires,
        )
