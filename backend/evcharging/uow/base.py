"""
Unit of Work contract shared by the owner and session services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evcharging.repositories import OwnerRepository, SessionRepository


class UnitOfWork(ABC):
    """
    One transactional boundary over the owner and session repositories.

    Both repositories are bound to the same database session, so a block
    that registers an owner and closes their sessions lands or fails as one.
    Leaving the block cleanly commits (or, for read-only variants, always
    rolls back); an exception rolls back and propagates.
    """

    owners: OwnerRepository
    sessions: SessionRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
