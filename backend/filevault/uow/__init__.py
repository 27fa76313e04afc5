"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed units of work used throughout
the application, alongside the abstract contract that services depend on.
"""

from .base import SessionFactory, UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "SessionFactory",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
