"""User repository: read access and the linked remote identity."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.user import UserResult
from guildsync.infrastructure.persistence.models.user import User
from guildsync.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    return UserResult(
        id=u.id,
        username=u.username,
        email=u.email,
        remote_user_id=u.remote_user_id,
        remote_username=u.remote_username,
        is_active=u.is_active,
    )


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        row = await self.get_entity(user_id)
        return _user_to_result(row) if row else None

    async def get_remote_identity(self, user_id: str) -> str | None:
        """Return the linked Discord user id; None when unlinked or unknown."""
        return await self.db.scalar(
            select(User.remote_user_id).where(User.id == user_id)
        )
