"""
evcharging.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token issuing and refresh-session storage.

Modules
-------
- :mod:`token_issuer`:
    Defines :class:`~.TokenIssuer` (signed access tokens, opaque refresh tokens).

- :mod:`session_store`:
    Defines :class:`~.SessionStore` and :class:`~.SessionView`, the
    store-backed authority behind refresh tokens.

Design Notes
------------
Concrete adapters (database, Redis) implement these interfaces under
``evcharging.infra``; the in-memory and stub variants serve unit tests.
"""

from __future__ import annotations

from .session_store import InMemorySessionStore, SessionStore, SessionView
from .token_issuer import IssuedToken, StubTokenIssuer, TokenIssuer, new_refresh_token

__all__ = [
    "TokenIssuer",
    "IssuedToken",
    "StubTokenIssuer",
    "new_refresh_token",
    "SessionStore",
    "SessionView",
    "InMemorySessionStore",
]
