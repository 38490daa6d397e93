"""Event management: create, update (status machine), archive, query.

The temporary event role and the guild scheduled event are mirrored
best-effort; failures become sync warnings on the result.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from guildsync.application.dtos.event import (
    EventCreate,
    EventList,
    EventListFilter,
    EventMutationResult,
    EventResult,
    EventUpdate,
)
from guildsync.application.dtos.remote import ScheduledEventSpec
from guildsync.application.dtos.result import OperationResult
from guildsync.application.interfaces.repositories import IUnitOfWork
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import UnitOfWorkFactory, run_operation
from guildsync.application.use_cases.events.event_access import EventAccessService
from guildsync.core.constants import DEFAULT_EVENT_DURATION_MINUTES
from guildsync.domain.entities.event import EventEntity, validate_status_transition
from guildsync.domain.enums import EventStatus, EventType
from guildsync.domain.exceptions import (
    EventNotFoundException,
    PrerequisitesNotFoundException,
    RemoteSyncError,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Only these statuses exist on guild scheduled events.
_MIRRORED_STATUSES = {EventStatus.ACTIVE, EventStatus.COMPLETED, EventStatus.CANCELLED}


class EventService:
    """Event CRUD with remote scheduled-event mirroring."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        adapter: IRemoteGuildAdapter,
        access_service: EventAccessService,
        *,
        default_duration: int = DEFAULT_EVENT_DURATION_MINUTES,
    ) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter
        self._access = access_service
        self._default_duration = default_duration

    async def create_event(
        self, data: EventCreate, created_by: str | None = None
    ) -> OperationResult[EventMutationResult]:
        return await run_operation(self._create(data, created_by), name="create_event")

    async def update_event(
        self, event_id: str, patch: EventUpdate, actor_id: str | None = None
    ) -> OperationResult[EventMutationResult]:
        return await run_operation(self._update(event_id, patch, actor_id), name="update_event")

    async def archive_event(
        self, event_id: str, actor_id: str | None = None
    ) -> OperationResult[EventMutationResult]:
        return await run_operation(self._archive(event_id, actor_id), name="archive_event")

    async def get_event(self, event_id: str) -> OperationResult[EventResult]:
        return await run_operation(self._get(event_id), name="get_event")

    async def list_events(self, filters: EventListFilter) -> OperationResult[EventList]:
        return await run_operation(self._list(filters), name="list_events")

    @staticmethod
    async def _check_prerequisites(uow: IUnitOfWork, names: list[str]) -> None:
        """Every prerequisite must name an existing role or tag."""
        if not names:
            return
        known = {r.name for r in await uow.roles.get_by_names(names)}
        known |= {t.name for t in await uow.tags.get_by_names(names)}
        missing = [n for n in names if n not in known]
        if missing:
            raise PrerequisitesNotFoundException(missing)

    def _entity(self, event: EventResult) -> EventEntity:
        return EventEntity(
            id=event.id,
            title=event.title,
            status=event.status,
            scheduled_at=event.scheduled_at,
            duration_minutes=event.duration_minutes,
            capacity=event.capacity,
            prerequisite_roles=list(event.prerequisite_roles),
        )

    async def _create(self, data: EventCreate, created_by: str | None) -> EventMutationResult:
        prerequisites = list(dict.fromkeys(data.prerequisite_roles))
        EventEntity(
            id="",
            title=data.title,
            status=EventStatus.SCHEDULED,
            scheduled_at=data.scheduled_at,
            duration_minutes=data.duration_minutes,
            capacity=data.capacity,
            prerequisite_roles=prerequisites,
        )
        async with self._uow_factory() as uow:
            await self._check_prerequisites(uow, prerequisites)
            event = await uow.events.create_event(
                replace(data, prerequisite_roles=tuple(prerequisites)), created_by
            )
            await uow.activity.record(
                ActivityAction.EVENT_CREATED,
                EntityType.EVENT,
                event.id,
                {"title": event.title, "scheduled_at": event.scheduled_at.isoformat()},
                actor_id=created_by,
            )
            await uow.commit()
        logger.info("Event created: %s (%s)", event.title, event.id)

        warnings: list[str] = []
        remote: dict[str, Any] = {}
        if data.create_event_role and event.remote_channel_id:
            try:
                role_id = await self._adapter.create_temporary_event_role(
                    event.title, event.remote_channel_id
                )
            except RemoteSyncError as exc:
                logger.warning("Failed to create event role for %s: %s", event.id, exc.message)
                warnings.append(f"Failed to create event role: {exc.message}")
            else:
                if role_id is None:
                    warnings.append("Event channel is not a voice or stage channel")
                else:
                    remote["event_role_id"] = role_id
        if data.create_remote_event:
            spec = ScheduledEventSpec(
                name=event.title,
                description=event.description,
                start_time=event.scheduled_at,
                end_time=self._entity(event).ends_at(self._default_duration),
                channel_id=event.remote_channel_id,
                is_stage=event.event_type == EventType.STAGE,
            )
            try:
                remote["remote_event_id"] = await self._adapter.create_scheduled_event(spec)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to create scheduled event for %s: %s", event.id, exc.message
                )
                warnings.append(f"Failed to create Discord scheduled event: {exc.message}")
        if remote:
            async with self._uow_factory() as uow:
                event = await uow.events.update_event(event.id, remote)
                await uow.commit()
        return EventMutationResult(event=event, sync_warnings=warnings)

    async def _update(
        self, event_id: str, patch: EventUpdate, actor_id: str | None
    ) -> EventMutationResult:
        changes = patch.changed_fields()
        async with self._uow_factory() as uow:
            current = await uow.events.get_by_id(event_id)
            if current is None:
                raise EventNotFoundException(event_id)
            if patch.status is not None:
                validate_status_transition(current.status, patch.status)
            if "prerequisite_roles" in changes:
                changes["prerequisite_roles"] = list(dict.fromkeys(changes["prerequisite_roles"]))
                await self._check_prerequisites(uow, changes["prerequisite_roles"])
            self._entity(replace(current, **changes))
            updated = await uow.events.update_event(event_id, changes)
            if updated is None:
                raise EventNotFoundException(event_id)
            await uow.activity.record(
                ActivityAction.EVENT_UPDATED,
                EntityType.EVENT,
                event_id,
                {"changes": changes},
                actor_id=actor_id,
            )
            if patch.status is not None:
                await uow.activity.record(
                    ActivityAction.EVENT_STATUS_CHANGED,
                    EntityType.EVENT,
                    event_id,
                    {"from": current.status, "to": patch.status},
                    actor_id=actor_id,
                )
            await uow.commit()

        warnings: list[str] = []
        if updated.remote_event_id:
            spec = ScheduledEventSpec(
                name=patch.title,
                description=patch.description,
                start_time=patch.scheduled_at,
                end_time=(
                    self._entity(updated).ends_at(self._default_duration)
                    if patch.scheduled_at or patch.duration_minutes
                    else None
                ),
                status=(
                    patch.status.value
                    if patch.status in _MIRRORED_STATUSES
                    else None
                ),
            )
            try:
                await self._adapter.update_scheduled_event(updated.remote_event_id, spec)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to update scheduled event %s for %s: %s",
                    updated.remote_event_id,
                    event_id,
                    exc.message,
                )
                warnings.append(f"Failed to update Discord scheduled event: {exc.message}")
        return EventMutationResult(event=updated, sync_warnings=warnings)

    async def _archive(self, event_id: str, actor_id: str | None) -> EventMutationResult:
        async with self._uow_factory() as uow:
            current = await uow.events.get_by_id(event_id)
        if current is None:
            raise EventNotFoundException(event_id)

        warnings: list[str] = []
        cleanup = await self._access.cleanup_event(event_id, reason="event_deleted")
        if not cleanup.success:
            warnings.append(f"Access cleanup failed: {cleanup.error.message}")
        elif cleanup.data.errors:
            warnings.append(f"Access cleanup finished with {cleanup.data.errors} error(s)")

        async with self._uow_factory() as uow:
            archived = await uow.events.archive(event_id)
            if archived is None:
                raise EventNotFoundException(event_id)
            await uow.activity.record(
                ActivityAction.EVENT_DELETED,
                EntityType.EVENT,
                event_id,
                {"title": current.title},
                actor_id=actor_id,
            )
            await uow.commit()

        if archived.remote_event_id:
            try:
                await self._adapter.delete_scheduled_event(archived.remote_event_id)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to delete scheduled event %s: %s", archived.remote_event_id, exc.message
                )
                warnings.append(f"Failed to delete Discord scheduled event: {exc.message}")
        return EventMutationResult(event=archived, sync_warnings=warnings)

    async def _get(self, event_id: str) -> EventResult:
        async with self._uow_factory() as uow:
            event = await uow.events.get_by_id(event_id)
        if event is None:
            raise EventNotFoundException(event_id)
        return event

    async def _list(self, filters: EventListFilter) -> EventList:
        async with self._uow_factory() as uow:
            items, total = await uow.events.list_events(filters)
        return EventList(items=items, total=total, page=filters.page, limit=filters.limit)
