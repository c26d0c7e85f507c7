"""Persistence repositories bound to the SQLAlchemy session."""

from .base import BaseRepository, Page, Pagination
from .owner import OwnerRepository, normalize_nic
from .session import SessionRepository

__all__ = [
    "BaseRepository",
    "OwnerRepository",
    "Page",
    "Pagination",
    "SessionRepository",
    "normalize_nic",
]
