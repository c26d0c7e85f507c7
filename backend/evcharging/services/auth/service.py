# evcharging/services/auth/service.py
from __future__ import annotations

import logging
from datetime import UTC, datetime

from evcharging.core.logger import mask_identifier
from evcharging.repositories.owner import OwnerRepository
from evcharging.services._shared.base import BaseService
from evcharging.services._shared.errors import (
    AccountUnavailableError,
    InvalidCredentialsError,
    InvalidOrExpiredRefreshTokenError,
    InvalidRefreshTokenError,
)
from evcharging.services._shared.policies.common import EV_OWNER
from evcharging.services._shared.ports.session_store import SessionStore
from evcharging.services._shared.ports.token_issuer import TokenIssuer
from evcharging.services.auth.dto import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    Access tokens come from a pluggable :class:`TokenIssuer`; refresh tokens are
    opaque values whose only authority is an active, unexpired record in the
    :class:`SessionStore`. Every refresh rotates the stored value in place.

    Failure messages are fixed per operation so callers cannot tell an unknown
    NIC from a wrong password, or a revoked token from an expired one.
    """

    def __init__(
        self,
        *,
        token_issuer: TokenIssuer,
        session_store: SessionStore,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_issuer: Adapter for signed access / opaque refresh tokens.
        :param session_store: Store with atomic match-and-mutate rotation.
        """
        super().__init__()
        self.tokens = token_issuer
        self.sessions = session_store

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and open a new session.

        :param dto: Login input.
        :returns: Access/Refresh token pair with expiries.
        :raises InvalidCredentialsError: Unknown NIC, inactive account or wrong password.
        """
        with self.ro_uow() as uow:
            repo: OwnerRepository = uow.owners
            owner = repo.get_by_nic(dto.nic, active_only=True)
            if owner is None or not owner.verify_password(dto.password):
                log.warning(
                    "login rejected for nic=%s",
                    mask_identifier(dto.nic),
                    extra={"event": "auth.login", "outcome": "rejected"},
                )
                raise InvalidCredentialsError()

            owner_id, nic = owner.id, owner.nic

        access = self.tokens.issue_access_token(
            owner_id=owner_id, user_type=EV_OWNER, role=EV_OWNER, nic=nic
        )
        refresh = self.tokens.issue_refresh_token()
        session = self.sessions.create(
            owner_id=owner_id,
            user_type=EV_OWNER,
            refresh_token=refresh.token,
            expires_at=refresh.expires_at,
        )
        # Stamped only once the session exists
        with self.rw_uow() as uow:
            stamped = uow.owners.get(owner_id)
            if stamped is not None:
                stamped.last_login = self.now_utc()
        log.info(
            "login succeeded",
            extra={
                "event": "auth.login",
                "outcome": "ok",
                "owner_id": owner_id,
                "session_id": session.id,
            },
        )
        return TokenPairOut(
            owner_id=owner_id,
            user_type=EV_OWNER,
            role=EV_OWNER,
            access_token=access.token,
            access_expires_at=access.expires_at,
            refresh_token=refresh.token,
            refresh_expires_at=refresh.expires_at,
        )

    # ------------------------------------------------------------------ #
    # Refresh with in-place rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - Requires an active session whose expiry is strictly in the future.
        - The stored value is swapped by a single conditional write; of two
          concurrent callers presenting the same token only one succeeds.
        - Sessions of deleted or deactivated accounts are closed on sight.

        :raises InvalidOrExpiredRefreshTokenError: Token unknown, inactive,
            expired, or rotated away by a concurrent caller.
        :raises AccountUnavailableError: Owner deleted or deactivated.
        """
        now = self.now_utc()
        session = self.sessions.find_active(dto.refresh_token, now=now)
        if session is None:
            raise InvalidOrExpiredRefreshTokenError()

        with self.ro_uow() as uow:
            repo: OwnerRepository = uow.owners
            owner = repo.get(session.owner_id)
            available = owner is not None and owner.is_active
            nic = owner.nic if owner is not None else None

        if not available:
            self.sessions.deactivate(session.id)
            log.warning(
                "refresh for unavailable account; session closed",
                extra={
                    "event": "auth.refresh",
                    "outcome": "account_unavailable",
                    "owner_id": session.owner_id,
                    "session_id": session.id,
                },
            )
            raise AccountUnavailableError()

        access = self.tokens.issue_access_token(
            owner_id=session.owner_id,
            user_type=session.user_type,
            role=EV_OWNER,
            nic=nic,
        )
        refresh = self.tokens.issue_refresh_token()
        rotated = self.sessions.rotate(
            old_token=dto.refresh_token,
            new_token=refresh.token,
            new_expires_at=refresh.expires_at,
            now=now,
        )
        if not rotated:
            log.warning(
                "refresh lost rotation race",
                extra={
                    "event": "auth.refresh",
                    "outcome": "race_lost",
                    "session_id": session.id,
                },
            )
            raise InvalidOrExpiredRefreshTokenError()

        log.info(
            "refresh token rotated",
            extra={
                "event": "auth.refresh",
                "outcome": "ok",
                "owner_id": session.owner_id,
                "session_id": session.id,
            },
        )
        return TokenPairOut(
            owner_id=session.owner_id,
            user_type=session.user_type,
            role=EV_OWNER,
            access_token=access.token,
            access_expires_at=access.expires_at,
            refresh_token=refresh.token,
            refresh_expires_at=refresh.expires_at,
        )

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Close the active session carrying the given refresh token.

        The record is kept (``is_active=False``) as an audit trail.

        :raises InvalidRefreshTokenError: No active session carries the token.
        """
        if not dto.refresh_token or not self.sessions.deactivate_by_token(dto.refresh_token):
            raise InvalidRefreshTokenError()
        log.info("logout", extra={"event": "auth.logout", "outcome": "ok"})

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
