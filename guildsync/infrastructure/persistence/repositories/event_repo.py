"""Event repository. Read methods return EventResult (DTO)."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.event import EventCreate, EventListFilter, EventResult
from guildsync.domain.enums import EventStatus, EventType
from guildsync.infrastructure.persistence.models.event import Event
from guildsync.infrastructure.persistence.repositories.base import BaseRepository
from guildsync.shared.utils.datetime import ensure_utc


def _event_to_result(e: Event) -> EventResult:
    """Map ORM Event to application EventResult."""
    return EventResult(
        id=e.id,
        title=e.title,
        description=e.description,
        event_type=EventType(e.event_type),
        difficulty_level=e.difficulty_level,
        status=EventStatus(e.status),
        scheduled_at=ensure_utc(e.scheduled_at),
        duration_minutes=e.duration_minutes,
        capacity=e.capacity,
        prerequisite_roles=list(e.prerequisite_roles or []),
        remote_channel_id=e.remote_channel_id,
        remote_event_id=e.remote_event_id,
        event_role_id=e.event_role_id,
        is_archived=e.is_archived,
        created_by=e.created_by,
        created_at=e.created_at,
    )


class EventRepository(BaseRepository[Event]):
    """Event store. Archived events are hidden unless include_archived is set."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Event)

    async def _get_live(self, event_id: str, *, include_archived: bool = False) -> Event | None:
        row = await self.get_entity(event_id)
        if row is None or (row.is_archived and not include_archived):
            return None
        return row

    async def get_by_id(
        self, event_id: str, *, include_archived: bool = False
    ) -> EventResult | None:
        row = await self._get_live(event_id, include_archived=include_archived)
        return _event_to_result(row) if row else None

    async def lock(self, event_id: str) -> EventResult | None:
        """SELECT ... FOR UPDATE; serializes capacity checks for one event."""
        result = await self.db.execute(
            select(Event)
            .where(Event.id == event_id, Event.is_archived.is_(False))
            .with_for_update()
        )
        row = result.scalar_one_or_none()
        return _event_to_result(row) if row else None

    async def list_events(self, filters: EventListFilter) -> tuple[list[EventResult], int]:
        conditions = [Event.is_archived.is_(False)]
        if filters.status is not None:
            conditions.append(Event.status == filters.status.value)
        total = await self.db.scalar(
            select(func.count()).select_from(Event).where(*conditions)
        )
        result = await self.db.execute(
            select(Event)
            .where(*conditions)
            .order_by(Event.scheduled_at.asc())
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        return [_event_to_result(e) for e in result.scalars().all()], int(total or 0)

    async def create_event(self, data: EventCreate, created_by: str | None) -> EventResult:
        row = Event(
            title=data.title,
            description=data.description,
            event_type=data.event_type.value,
            difficulty_level=data.difficulty_level,
            status=EventStatus.SCHEDULED.value,
            scheduled_at=data.scheduled_at,
            duration_minutes=data.duration_minutes,
            capacity=data.capacity,
            prerequisite_roles=list(data.prerequisite_roles),
            remote_channel_id=data.remote_channel_id,
            created_by=created_by,
        )
        return _event_to_result(await self.create(row))

    async def update_event(self, event_id: str, values: dict[str, Any]) -> EventResult | None:
        row = await self._get_live(event_id)
        if row is None:
            return None
        for key, value in values.items():
            setattr(row, key, value.value if isinstance(value, EventStatus) else value)
        return _event_to_result(await self.save(row))

    async def set_status(self, event_id: str, status: EventStatus) -> EventResult | None:
        return await self.update_event(event_id, {"status": status})

    async def archive(self, event_id: str) -> EventResult | None:
        row = await self._get_live(event_id)
        if row is None:
            return None
        row.is_archived = True
        return _event_to_result(await self.save(row))
