"""Operator commands for tokens and refresh sessions."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from evcharging.api.deps import get_token_config
from evcharging.core.extensions import get_session_store
from evcharging.models.base import utcnow
from evcharging.services._shared.policies.common import BACK_OFFICE

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Token and session maintenance commands."""


@auth_cli.command("issue-token")
@click.option("--subject", required=True, help="Principal id written to the ``sub`` claim.")
@click.option("--role", default=BACK_OFFICE, show_default=True, help="Role tag for the token.")
@click.option("--nic", default=None, help="Optional NIC claim.")
@click.option(
    "--minutes",
    type=click.IntRange(min=1),
    default=None,
    help="Lifetime override (defaults to JWT_EXPIRATION_MINUTES).",
)
@with_appcontext
def issue_token(subject: str, role: str, nic: str | None, minutes: int | None) -> None:
    """Mint an access token, e.g. for a back-office operator.

    Back-office accounts live outside this service; the token is the only
    credential they need to call the owner-management endpoints.
    """
    from evcharging.infra.jwt.flask_jwt_token_issuer import JWTTokenIssuer

    cfg = get_token_config()
    if minutes is not None:
        cfg = replace(cfg, access_expires=timedelta(minutes=minutes))
    issued = JWTTokenIssuer(cfg=cfg).issue_access_token(
        owner_id=subject, user_type=role, role=role, nic=nic
    )
    LOGGER.info("access token issued", extra={"event": "cli.issue_token", "owner_id": subject})
    click.echo(issued.token)
    click.echo(f"expires_at={issued.expires_at.isoformat()}", err=True)


@auth_cli.command("purge-sessions")
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=30,
    show_default=True,
    help="Keep closed or expired sessions touched within this many days.",
)
@with_appcontext
def purge_sessions(days: int) -> None:
    """Delete closed or expired refresh sessions older than the retention window."""
    store = get_session_store()
    purge = getattr(store, "purge_stale", None)
    if purge is None:
        backend = current_app.config.get("SESSION_STORE")
        click.echo(f"Session store {backend!r} expires records on its own; nothing to purge.")
        return
    removed = purge(utcnow() - timedelta(days=days))
    LOGGER.info("sessions purged", extra={"event": "cli.purge_sessions", "outcome": removed})
    click.echo(f"Purged {removed} session(s).")
