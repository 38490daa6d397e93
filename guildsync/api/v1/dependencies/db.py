"""DB session and unit-of-work dependencies (composition root)."""

from __future__ import annotations

from guildsync.application.operations import UnitOfWorkFactory
from guildsync.infrastructure.persistence.database import get_db, get_session_factory
from guildsync.infrastructure.persistence.unit_of_work import SqlUnitOfWork

__all__ = ["get_db", "get_uow_factory"]


def get_uow_factory() -> UnitOfWorkFactory:
    """Factory handing each operation its own SqlUnitOfWork."""
    session_factory = get_session_factory()

    def _factory() -> SqlUnitOfWork:
        return SqlUnitOfWork(session_factory)

    return _factory
