"""SQL unit of work: one AsyncSession and one transaction per operation.

Services open a unit of work per local write and commit it before calling the
remote guild, so no transaction stays open across network I/O. Bulk
operations create one unit of work per item, which keeps concurrent tasks on
separate sessions.
"""

from __future__ import annotations

from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from guildsync.infrastructure.persistence.repositories import (
    EventAccessRepository,
    EventRepository,
    RoleRepository,
    TagRepository,
    UserRepository,
    UserRoleRepository,
    UserTagRepository,
)
from guildsync.infrastructure.services.activity_log_service import ActivityLogService


class SqlUnitOfWork:
    """IUnitOfWork over SQLAlchemy. Rolls back unless commit() was called."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self.session = self._session_factory()
        session = self.session
        self.roles = RoleRepository(session)
        self.user_roles = UserRoleRepository(session)
        self.tags = TagRepository(session)
        self.user_tags = UserTagRepository(session)
        self.users = UserRepository(session)
        self.events = EventRepository(session)
        self.event_access = EventAccessRepository(session)
        self.activity = ActivityLogService(session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        assert self.session is not None
        try:
            if self.session.in_transaction():
                await self.session.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        assert self.session is not None
        await self.session.rollback()
