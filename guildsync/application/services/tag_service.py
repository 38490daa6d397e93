"""Tag application service: tag store CRUD and holder resync on display changes."""

from __future__ import annotations

import re

from guildsync.application.dtos.result import OperationResult
from guildsync.application.dtos.tag import (
    TagCreate,
    TagList,
    TagListFilter,
    TagMutationResult,
    TagResult,
    TagUpdate,
)
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import UnitOfWorkFactory, gather_in_batches, run_operation
from guildsync.application.use_cases.tags.tag_reconciliation import TagReconciliationEngine
from guildsync.core.constants import TAG_NAME_PATTERN
from guildsync.domain.exceptions import (
    RemoteSyncError,
    ResourceNotFoundException,
    TagAlreadyExistsException,
    TagInUseException,
    ValidationException,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_TAG_NAME_RE = re.compile(TAG_NAME_PATTERN)

# Changes that alter how the tag's guild role looks.
_DISPLAY_FIELDS = ("display_name", "color")


def _validate_tag_name(name: str) -> None:
    if not _TAG_NAME_RE.match(name):
        raise ValidationException(
            "Tag name must contain only lowercase letters, digits and underscores",
            field="name",
        )


class TagService:
    """Create, update, archive and list tags."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        adapter: IRemoteGuildAdapter,
        tag_engine: TagReconciliationEngine,
        *,
        batch_size: int = 10,
    ) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter
        self._tag_engine = tag_engine
        self._batch_size = batch_size

    async def create_tag(
        self, data: TagCreate, actor_id: str | None = None
    ) -> OperationResult[TagResult]:
        return await run_operation(self._create_tag(data, actor_id), name="create_tag")

    async def update_tag(
        self, tag_id: str, patch: TagUpdate, actor_id: str | None = None
    ) -> OperationResult[TagMutationResult]:
        """Update a tag; display changes are pushed to every holder's guild role."""
        return await run_operation(self._update_tag(tag_id, patch, actor_id), name="update_tag")

    async def archive_tag(
        self, tag_id: str, actor_id: str | None = None
    ) -> OperationResult[TagMutationResult]:
        return await run_operation(self._archive_tag(tag_id, actor_id), name="archive_tag")

    async def get_tag(self, tag_id: str) -> OperationResult[TagResult]:
        return await run_operation(self._get_tag(tag_id), name="get_tag")

    async def list_tags(self, filters: TagListFilter) -> OperationResult[TagList]:
        return await run_operation(self._list_tags(filters), name="list_tags")

    async def _create_tag(self, data: TagCreate, actor_id: str | None) -> TagResult:
        _validate_tag_name(data.name)
        async with self._uow_factory() as uow:
            if await uow.tags.get_by_name(data.name, include_archived=True):
                raise TagAlreadyExistsException(data.name)
            tag = await uow.tags.create_tag(data)
            await uow.activity.record(
                ActivityAction.TAG_CREATED,
                EntityType.TAG,
                tag.id,
                {"name": tag.name, "category": tag.category},
                actor_id=actor_id,
            )
            await uow.commit()
        logger.info("Tag created: %s (%s)", tag.name, tag.id)
        return tag

    async def _update_tag(
        self, tag_id: str, patch: TagUpdate, actor_id: str | None
    ) -> TagMutationResult:
        changes = patch.changed_fields()
        if patch.name is not None:
            _validate_tag_name(patch.name)
        async with self._uow_factory() as uow:
            current = await uow.tags.get_by_id(tag_id)
            if current is None or current.is_archived:
                raise ResourceNotFoundException("tag", tag_id)
            if patch.name and patch.name != current.name:
                if await uow.tags.get_by_name(patch.name, include_archived=True):
                    raise TagAlreadyExistsException(patch.name)
            updated = await uow.tags.update_tag(tag_id, patch)
            if updated is None:
                raise ResourceNotFoundException("tag", tag_id)
            await uow.activity.record(
                ActivityAction.TAG_UPDATED,
                EntityType.TAG,
                tag_id,
                {"changes": changes, "previous_name": current.name},
                actor_id=actor_id,
            )
            holders = await uow.user_tags.list_active_user_ids(tag_id)
            await uow.commit()

        warnings: list[str] = []
        display_changed = any(
            changes.get(f) is not None and changes[f] != getattr(current, f)
            for f in _DISPLAY_FIELDS
        )
        if display_changed and updated.remote_role_id:
            warnings.extend(await self._push_display(updated))
        if display_changed and holders:
            warnings.extend(await self._resync_holders(updated, holders))
        return TagMutationResult(tag=updated, sync_warnings=warnings)

    async def _push_display(self, tag: TagResult) -> list[str]:
        try:
            await self._adapter.update_role(
                tag.remote_role_id, {"name": tag.display_name, "color": tag.color}
            )
        except RemoteSyncError as exc:
            logger.warning(
                "Failed to update Discord role for tag %s (%s): %s",
                tag.name,
                tag.remote_role_id,
                exc.message,
            )
            return [f"Failed to update Discord role for tag {tag.name}: {exc.message}"]
        return []

    async def _resync_holders(self, tag: TagResult, holders: list[str]) -> list[str]:
        outcomes = await gather_in_batches(
            holders, self._batch_size, self._tag_engine.sync_user_tags_with_discord
        )
        warnings: list[str] = []
        for user_id, outcome in zip(holders, outcomes, strict=True):
            if not outcome.success:
                warnings.append(f"Tag resync for user {user_id}: {outcome.error.message}")
            elif outcome.data.errors:
                warnings.extend(f"Tag resync for user {user_id}: {e}" for e in outcome.data.errors)
        logger.info("Resynced %d holders of tag %s", len(holders), tag.name)
        return warnings

    async def _archive_tag(self, tag_id: str, actor_id: str | None) -> TagMutationResult:
        async with self._uow_factory() as uow:
            current = await uow.tags.get_by_id(tag_id)
            if current is None or current.is_archived:
                raise ResourceNotFoundException("tag", tag_id)
            active_grants = await uow.user_tags.count_active_for_tag(tag_id)
            if active_grants:
                raise TagInUseException(current.name, active_grants)
            archived = await uow.tags.archive(tag_id)
            await uow.activity.record(
                ActivityAction.TAG_DELETED,
                EntityType.TAG,
                tag_id,
                {"name": current.name, "remote_role_id": current.remote_role_id},
                actor_id=actor_id,
            )
            await uow.commit()

        warnings: list[str] = []
        if current.remote_role_id:
            try:
                await self._adapter.delete_role(current.remote_role_id)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to delete Discord role for tag %s (%s): %s",
                    current.name,
                    current.remote_role_id,
                    exc.message,
                )
                warnings.append(f"Failed to delete Discord role for tag {current.name}: {exc.message}")
        return TagMutationResult(tag=archived, sync_warnings=warnings)

    async def _get_tag(self, tag_id: str) -> TagResult:
        async with self._uow_factory() as uow:
            tag = await uow.tags.get_by_id(tag_id)
        if tag is None:
            raise ResourceNotFoundException("tag", tag_id)
        return tag

    async def _list_tags(self, filters: TagListFilter) -> TagList:
        async with self._uow_factory() as uow:
            items, total = await uow.tags.list_tags(filters)
        return TagList(items=items, total=total, page=filters.page, limit=filters.limit)
