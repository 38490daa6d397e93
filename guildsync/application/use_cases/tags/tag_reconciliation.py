"""Tag reconciliation: grant/revoke tags, primary tag, and guild tag-role sync.

Tag roles are synced wholesale (remove all, re-add active) rather than
diffed like platform roles; see sync_user_tags_with_discord.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from guildsync.application.dtos.result import OperationResult
from guildsync.application.dtos.role import BulkItem, BulkItemError, BulkResult
from guildsync.application.dtos.tag import (
    TagAssignResult,
    TagRemoveResult,
    TagResult,
    TagSyncResult,
    UserTagResult,
)
from guildsync.application.dtos.user import UserResult
from guildsync.application.interfaces.repositories import IUnitOfWork
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import (
    UnitOfWorkFactory,
    gather_in_batches,
    record_activity,
    run_operation,
)
from guildsync.core.constants import DEFAULT_TAG_GRANT_REASON, DEFAULT_TAG_REVOKE_REASON
from guildsync.domain.enums import GrantAction
from guildsync.domain.exceptions import (
    RemoteSyncError,
    ResourceNotFoundException,
    TagNotAssignableException,
    TagNotHeldException,
    UserNotFoundException,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger
from guildsync.shared.utils.colors import hex_to_int

logger = get_logger(__name__)

REMOTE_ACTOR_NOT_PRESENT = "REMOTE_ACTOR_NOT_PRESENT"


class TagReconciliationEngine:
    """Assign, remove and sync user tags."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        adapter: IRemoteGuildAdapter,
        *,
        batch_size: int = 10,
    ) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter
        self._batch_size = batch_size

    async def assign_tag_to_user(
        self,
        user_id: str,
        tag_name: str,
        granted_by: str | None = None,
        reason: str = DEFAULT_TAG_GRANT_REASON,
        is_primary: bool = False,
        notes: str | None = None,
        sync_remote: bool = True,
    ) -> OperationResult[TagAssignResult]:
        """Grant a tag; a tag already held is skipped but still becomes primary on request."""
        return await run_operation(
            self._assign(user_id, tag_name, granted_by, reason, is_primary, notes, sync_remote),
            name="assign_tag_to_user",
        )

    async def remove_tag_from_user(
        self,
        user_id: str,
        tag_name: str,
        revoked_by: str | None = None,
        reason: str = DEFAULT_TAG_REVOKE_REASON,
        sync_remote: bool = True,
    ) -> OperationResult[TagRemoveResult]:
        return await run_operation(
            self._remove(user_id, tag_name, revoked_by, reason, sync_remote),
            name="remove_tag_from_user",
        )

    async def set_primary_tag(
        self, user_id: str, tag_name: str, actor_id: str | None = None
    ) -> OperationResult[UserTagResult]:
        """Make tag_name the user's only primary tag."""
        return await run_operation(
            self._set_primary(user_id, tag_name, actor_id), name="set_primary_tag"
        )

    async def bulk_assign_tag(
        self,
        user_ids: Sequence[str],
        tag_name: str,
        granted_by: str | None = None,
        reason: str = DEFAULT_TAG_GRANT_REASON,
    ) -> OperationResult[BulkResult[TagAssignResult]]:
        return await run_operation(
            self._bulk_assign(user_ids, tag_name, granted_by, reason), name="bulk_assign_tag"
        )

    async def sync_user_tags_with_discord(self, user_id: str) -> OperationResult[TagSyncResult]:
        """Replace the member's tag roles with one role per active tag."""
        return await run_operation(self._sync(user_id), name="sync_user_tags_with_discord")

    @staticmethod
    async def _require_user(uow: IUnitOfWork, user_id: str) -> UserResult:
        user = await uow.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    async def _require_tag(uow: IUnitOfWork, tag_name: str) -> TagResult:
        tag = await uow.tags.get_by_name(tag_name)
        if tag is None:
            raise ResourceNotFoundException("tag", tag_name)
        return tag

    async def _assign(
        self,
        user_id: str,
        tag_name: str,
        granted_by: str | None,
        reason: str,
        is_primary: bool,
        notes: str | None,
        sync_remote: bool,
    ) -> TagAssignResult:
        async with self._uow_factory() as uow:
            user = await self._require_user(uow, user_id)
            tag = await self._require_tag(uow, tag_name)
            if not tag.is_active or not tag.is_assignable:
                raise TagNotAssignableException(tag_name)
            action, grant = await uow.user_tags.grant(
                user_id, tag.id, granted_by, reason, notes
            )
            if action == GrantAction.SKIP:
                # Already held: only the primary flag can change.
                if is_primary and not grant.is_primary:
                    grant = await self._make_primary(uow, user_id, tag, granted_by)
                    await uow.commit()
                return TagAssignResult(user_tag=grant, skipped=True)
            await uow.activity.record(
                ActivityAction.TAG_ASSIGNED,
                EntityType.USER,
                user_id,
                {"tag_id": tag.id, "tag_name": tag.name, "reason": reason},
                actor_id=granted_by,
            )
            if is_primary:
                grant = await self._make_primary(uow, user_id, tag, granted_by)
            await uow.commit()
        logger.info("Tag %s assigned to user %s (%s)", tag.name, user_id, action.value)

        warnings: list[str] = []
        if sync_remote:
            warnings = await self._push_tag(user_id, user.remote_user_id, tag, add=True)
        return TagAssignResult(user_tag=grant, skipped=False, sync_warnings=warnings)

    async def _remove(
        self,
        user_id: str,
        tag_name: str,
        revoked_by: str | None,
        reason: str,
        sync_remote: bool,
    ) -> TagRemoveResult:
        async with self._uow_factory() as uow:
            user = await self._require_user(uow, user_id)
            tag = await self._require_tag(uow, tag_name)
            revoked = await uow.user_tags.revoke(user_id, tag.id, revoked_by, reason)
            if revoked is None:
                return TagRemoveResult(tag_name=tag_name, removed=False, skipped=True)
            await uow.activity.record(
                ActivityAction.TAG_REMOVED,
                EntityType.USER,
                user_id,
                {"tag_id": tag.id, "tag_name": tag.name, "reason": reason},
                actor_id=revoked_by,
            )
            await uow.commit()

        warnings: list[str] = []
        if sync_remote and tag.remote_role_id:
            warnings = await self._push_tag(user_id, user.remote_user_id, tag, add=False)
        return TagRemoveResult(
            tag_name=tag_name, removed=True, skipped=False, sync_warnings=warnings
        )

    async def _set_primary(
        self, user_id: str, tag_name: str, actor_id: str | None
    ) -> UserTagResult:
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            tag = await self._require_tag(uow, tag_name)
            grant = await uow.user_tags.get_grant(user_id, tag.id)
            if grant is None or not grant.is_active:
                raise TagNotHeldException(user_id, tag_name)
            grant = await self._make_primary(uow, user_id, tag, actor_id)
            await uow.commit()
        return grant

    @staticmethod
    async def _make_primary(
        uow: IUnitOfWork, user_id: str, tag: TagResult, actor_id: str | None
    ) -> UserTagResult:
        """Clear every primary flag for the user, then set it on tag."""
        await uow.user_tags.clear_primary(user_id)
        await uow.user_tags.set_primary(user_id, tag.id)
        await uow.activity.record(
            ActivityAction.TAG_PRIMARY_SET,
            EntityType.USER,
            user_id,
            {"tag_id": tag.id, "tag_name": tag.name},
            actor_id=actor_id,
        )
        return await uow.user_tags.get_grant(user_id, tag.id)

    async def _ensure_remote_role(self, tag: TagResult) -> str:
        """Return the tag's guild role id, creating and storing it if needed."""
        if tag.remote_role_id:
            return tag.remote_role_id
        remote_role_id = await self._adapter.ensure_role_exists(
            tag.display_name, hex_to_int(tag.color)
        )
        async with self._uow_factory() as uow:
            await uow.tags.set_remote_role_id(tag.id, remote_role_id)
            await uow.commit()
        return remote_role_id

    async def _push_tag(
        self, user_id: str, remote_user_id: str | None, tag: TagResult, *, add: bool
    ) -> list[str]:
        verb = "add" if add else "remove"
        if not remote_user_id:
            return [f"User {user_id} has no linked Discord account; tag not synced"]
        try:
            if add:
                remote_role_id = await self._ensure_remote_role(tag)
                await self._adapter.add_member_to_role(remote_user_id, remote_role_id)
            else:
                await self._adapter.remove_member_from_role(remote_user_id, tag.remote_role_id)
        except RemoteSyncError as exc:
            logger.warning(
                "Failed to %s Discord tag role %s for user %s (%s): %s",
                verb,
                tag.name,
                user_id,
                remote_user_id,
                exc.message,
            )
            await record_activity(
                self._uow_factory,
                [
                    (
                        ActivityAction.DISCORD_TAG_SYNC_FAILED,
                        EntityType.USER,
                        user_id,
                        {"operation": verb, "tag_name": tag.name, "error": exc.message},
                    )
                ],
            )
            return [f"Failed to {verb} Discord role for tag {tag.name}: {exc.message}"]
        return []

    async def _bulk_assign(
        self,
        user_ids: Sequence[str],
        tag_name: str,
        granted_by: str | None,
        reason: str,
    ) -> BulkResult[TagAssignResult]:
        async def assign_one(user_id: str) -> OperationResult[TagAssignResult]:
            return await self.assign_tag_to_user(user_id, tag_name, granted_by, reason)

        ids = list(dict.fromkeys(user_ids))
        outcomes = await gather_in_batches(ids, self._batch_size, assign_one)
        results: list[BulkItem[TagAssignResult]] = []
        errors: list[BulkItemError] = []
        for user_id, outcome in zip(ids, outcomes, strict=True):
            if outcome.success:
                results.append(BulkItem(user_id=user_id, result=outcome.data))
            else:
                errors.append(
                    BulkItemError(
                        user_id=user_id, code=outcome.error.code, message=outcome.error.message
                    )
                )
        logger.info(
            "Bulk tag %s assignment: %d succeeded, %d failed", tag_name, len(results), len(errors)
        )
        return BulkResult(success=len(results), failed=len(errors), results=results, errors=errors)

    async def _sync(self, user_id: str) -> TagSyncResult | OperationResult[TagSyncResult]:
        async with self._uow_factory() as uow:
            user = await self._require_user(uow, user_id)
            active = await uow.user_tags.get_active_tags(user_id)
            synced = await uow.tags.list_synced()

        absent = OperationResult.fail(
            REMOTE_ACTOR_NOT_PRESENT,
            "User is not linked to a Discord account in the guild",
            {"user_id": user_id},
            data=TagSyncResult(removed=[], added=[], errors=[], actor_present=False),
        )
        if not user.remote_user_id:
            return absent
        member = await self._adapter.get_member(user.remote_user_id)
        if member is None:
            return absent

        removed: list[str] = []
        added: list[str] = []
        errors: list[str] = []
        for tag in synced:
            if tag.remote_role_id not in member.role_ids:
                continue
            try:
                await self._adapter.remove_member_from_role(user.remote_user_id, tag.remote_role_id)
                removed.append(tag.name)
            except RemoteSyncError as exc:
                logger.warning(
                    "Tag sync removal of %s failed for user %s: %s", tag.name, user_id, exc.message
                )
                errors.append(f"remove {tag.name}: {exc.message}")
        for grant in active:
            tag = grant.tag
            try:
                remote_role_id = await self._ensure_remote_role(tag)
                await self._adapter.add_member_to_role(user.remote_user_id, remote_role_id)
                added.append(tag.name)
            except RemoteSyncError as exc:
                logger.warning(
                    "Tag sync add of %s failed for user %s: %s", tag.name, user_id, exc.message
                )
                errors.append(f"add {tag.name}: {exc.message}")

        details: dict[str, Any] = {"removed": removed, "added": added}
        if errors:
            details["errors"] = errors
        await record_activity(
            self._uow_factory,
            [
                (
                    ActivityAction.DISCORD_TAG_SYNC_FAILED
                    if errors
                    else ActivityAction.DISCORD_TAG_SYNC_SUCCESS,
                    EntityType.USER,
                    user_id,
                    details,
                )
            ],
        )
        return TagSyncResult(removed=removed, added=added, errors=errors)
