"""Role repository. Read methods return RoleResult (DTO); ORM rows stay inside."""

from collections.abc import Iterable

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.role import (
    RoleCreate,
    RoleListFilter,
    RoleResult,
    RoleUpdate,
)
from guildsync.domain.exceptions import RoleAlreadyExistsException
from guildsync.infrastructure.persistence.models.role import Role
from guildsync.infrastructure.persistence.repositories.base import BaseRepository

_SORT_COLUMNS = {
    "name": Role.name,
    "sort_order": Role.sort_order,
    "created_at": Role.created_at,
}


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        color=r.color,
        sort_order=r.sort_order,
        is_system_role=r.is_system_role,
        remote_role_id=r.remote_role_id,
        is_archived=r.is_archived,
        permissions=tuple(r.permissions or ()),
        hoist=r.hoist,
        mentionable=r.mentionable,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


class RoleRepository(BaseRepository[Role]):
    """Role store. Names are unique across archived and live roles."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        row = await self.get_entity(role_id)
        return _role_to_result(row) if row else None

    async def get_by_name(
        self, name: str, *, include_archived: bool = False
    ) -> RoleResult | None:
        """Live role by name; with include_archived, falls back to the newest archived row."""
        q = select(Role).where(Role.name == name)
        if not include_archived:
            q = q.where(Role.is_archived.is_(False))
        q = q.order_by(Role.is_archived, Role.created_at.desc()).limit(1)
        result = await self.db.execute(q)
        row = result.scalars().first()
        return _role_to_result(row) if row else None

    async def get_by_names(self, names: Iterable[str]) -> list[RoleResult]:
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        result = await self.db.execute(
            select(Role).where(Role.name.in_(wanted), Role.is_archived.is_(False))
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def list_roles(self, filters: RoleListFilter) -> tuple[list[RoleResult], int]:
        """Search name/description, filter, sort and paginate."""
        conditions = []
        if not filters.include_archived:
            conditions.append(Role.is_archived.is_(False))
        if filters.is_system_role is not None:
            conditions.append(Role.is_system_role.is_(filters.is_system_role))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(Role.name.ilike(pattern), Role.description.ilike(pattern))
            )

        total = await self.db.scalar(
            select(func.count()).select_from(Role).where(*conditions)
        )
        column = _SORT_COLUMNS.get(filters.sort_by, Role.sort_order)
        direction = desc if filters.sort_order == "desc" else asc
        q = (
            select(Role)
            .where(*conditions)
            .order_by(direction(column), Role.name)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        result = await self.db.execute(q)
        return [_role_to_result(r) for r in result.scalars().all()], int(total or 0)

    async def list_synced(self) -> list[RoleResult]:
        result = await self.db.execute(
            select(Role).where(
                Role.is_archived.is_(False), Role.remote_role_id.is_not(None)
            )
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def create_role(self, data: RoleCreate) -> RoleResult:
        """Insert a role; a concurrent duplicate name raises RoleAlreadyExistsException."""
        role = Role(
            name=data.name,
            description=data.description,
            color=data.color,
            sort_order=data.sort_order,
            is_system_role=data.is_system_role,
            permissions=list(data.permissions),
            hoist=data.hoist,
            mentionable=data.mentionable,
        )
        try:
            created = await self.create(role)
        except IntegrityError:
            raise RoleAlreadyExistsException(data.name) from None
        return _role_to_result(created)

    async def update_role(self, role_id: str, patch: RoleUpdate) -> RoleResult | None:
        role = await self.get_entity(role_id)
        if role is None:
            return None
        for key, value in patch.changed_fields().items():
            setattr(role, key, list(value) if key == "permissions" else value)
        try:
            updated = await self.save(role)
        except IntegrityError:
            raise RoleAlreadyExistsException(patch.name or role.name) from None
        return _role_to_result(updated)

    async def set_remote_role_id(self, role_id: str, remote_role_id: str | None) -> None:
        role = await self.get_entity(role_id)
        if role is not None:
            role.remote_role_id = remote_role_id
            await self.db.flush()

    async def archive(self, role_id: str) -> RoleResult | None:
        role = await self.get_entity(role_id)
        if role is None:
            return None
        role.is_archived = True
        updated = await self.save(role)
        return _role_to_result(updated)
