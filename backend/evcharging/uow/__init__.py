"""Transactional boundaries for the owner and session repositories.

Services open :class:`SQLAlchemyUnitOfWork` for writes and
:class:`SQLAlchemyReadOnlyUnitOfWork` for lookups; both satisfy
:class:`UnitOfWork`.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
