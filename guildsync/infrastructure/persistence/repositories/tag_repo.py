"""Tag repository. Read methods return TagResult (DTO)."""

from collections.abc import Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.tag import TagCreate, TagListFilter, TagResult, TagUpdate
from guildsync.domain.enums import TagCategory
from guildsync.domain.exceptions import TagAlreadyExistsException
from guildsync.infrastructure.persistence.models.tag import Tag
from guildsync.infrastructure.persistence.repositories.base import BaseRepository


def _tag_to_result(t: Tag) -> TagResult:
    """Map ORM Tag to application TagResult."""
    return TagResult(
        id=t.id,
        name=t.name,
        display_name=t.display_name,
        description=t.description,
        category=TagCategory(t.category),
        color=t.color,
        icon=t.icon,
        is_active=t.is_active,
        is_assignable=t.is_assignable,
        is_earnable=t.is_earnable,
        remote_role_id=t.remote_role_id,
        is_archived=t.is_archived,
        created_at=t.created_at,
    )


class TagRepository(BaseRepository[Tag]):
    """Tag store."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tag)

    async def get_by_id(self, tag_id: str) -> TagResult | None:
        row = await self.get_entity(tag_id)
        return _tag_to_result(row) if row else None

    async def get_by_name(
        self, name: str, *, include_archived: bool = False
    ) -> TagResult | None:
        q = select(Tag).where(Tag.name == name)
        if not include_archived:
            q = q.where(Tag.is_archived.is_(False))
        row = (await self.db.execute(q)).scalar_one_or_none()
        return _tag_to_result(row) if row else None

    async def get_by_names(self, names: Iterable[str]) -> list[TagResult]:
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        result = await self.db.execute(
            select(Tag).where(Tag.name.in_(wanted), Tag.is_archived.is_(False))
        )
        return [_tag_to_result(t) for t in result.scalars().all()]

    async def list_tags(self, filters: TagListFilter) -> tuple[list[TagResult], int]:
        conditions = []
        if not filters.include_archived:
            conditions.append(Tag.is_archived.is_(False))
        if filters.category is not None:
            conditions.append(Tag.category == filters.category.value)
        if filters.assignable_only:
            conditions.append(Tag.is_assignable.is_(True))
            conditions.append(Tag.is_active.is_(True))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(
                    Tag.name.ilike(pattern),
                    Tag.display_name.ilike(pattern),
                    Tag.description.ilike(pattern),
                )
            )
        total = await self.db.scalar(select(func.count()).select_from(Tag).where(*conditions))
        result = await self.db.execute(
            select(Tag)
            .where(*conditions)
            .order_by(Tag.category, Tag.name)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        return [_tag_to_result(t) for t in result.scalars().all()], int(total or 0)

    async def list_synced(self) -> list[TagResult]:
        result = await self.db.execute(
            select(Tag).where(Tag.is_archived.is_(False), Tag.remote_role_id.is_not(None))
        )
        return [_tag_to_result(t) for t in result.scalars().all()]

    async def create_tag(self, data: TagCreate) -> TagResult:
        tag = Tag(
            name=data.name,
            display_name=data.display_name,
            description=data.description,
            category=data.category.value,
            color=data.color,
            icon=data.icon,
            is_active=data.is_active,
            is_assignable=data.is_assignable,
            is_earnable=data.is_earnable,
        )
        try:
            created = await self.create(tag)
        except IntegrityError:
            raise TagAlreadyExistsException(data.name) from None
        return _tag_to_result(created)

    async def update_tag(self, tag_id: str, patch: TagUpdate) -> TagResult | None:
        tag = await self.get_entity(tag_id)
        if tag is None:
            return None
        for key, value in patch.changed_fields().items():
            setattr(tag, key, value.value if isinstance(value, TagCategory) else value)
        try:
            updated = await self.save(tag)
        except IntegrityError:
            raise TagAlreadyExistsException(patch.name or tag.name) from None
        return _tag_to_result(updated)

    async def set_remote_role_id(self, tag_id: str, remote_role_id: str | None) -> None:
        tag = await self.get_entity(tag_id)
        if tag is not None:
            tag.remote_role_id = remote_role_id
            await self.db.flush()

    async def archive(self, tag_id: str) -> TagResult | None:
        tag = await self.get_entity(tag_id)
        if tag is None:
            return None
        tag.is_archived = True
        tag.is_active = False
        return _tag_to_result(await self.save(tag))
