"""Unit of Work contract and its SQLAlchemy implementations.

Services open a read-write unit for commands and a read-only one for queries;
both hand out the user, token, todo, note and URL repositories on one session.
"""

from .base import UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
