"""Role reconciliation: grant/revoke platform roles and converge guild membership.

Ledger writes commit before any remote call. Remote failures are logged and
reported as sync warnings (apply/remove) or per-role errors (reconcile); they
never roll the ledger back. Reconciliation diffs desired (active grants)
against current (guild roles) so running it twice is a no-op. Apply and remove
reconcile the member's whole role set after commit, so drift left by an earlier
failed sync is repaired on the next change.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from guildsync.application.dtos.result import OperationResult
from guildsync.application.dtos.role import (
    ApplyRolesResult,
    BulkItem,
    BulkItemError,
    BulkResult,
    ReconcileResult,
    RemoveRolesResult,
    RoleAssignment,
    RoleResult,
    RoleSyncError,
)
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import (
    UnitOfWorkFactory,
    gather_in_batches,
    record_activity,
    run_operation,
)
from guildsync.core.constants import DEFAULT_GRANT_REASON, DEFAULT_REVOKE_REASON
from guildsync.domain.enums import GrantAction
from guildsync.domain.exceptions import (
    DuplicateAssignmentException,
    NewbieRoleNotConfiguredException,
    RemoteSyncError,
    RolesNotFoundException,
    UserNotFoundException,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

REMOTE_ACTOR_NOT_PRESENT = "REMOTE_ACTOR_NOT_PRESENT"

NEWBIE_GRANT_REASON = "New user auto-assignment"


class RoleReconciliationEngine:
    """Apply, remove and reconcile user roles against the remote guild."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        adapter: IRemoteGuildAdapter,
        *,
        batch_size: int = 10,
        newbie_role_name: str = "NEWBIE",
    ) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter
        self._batch_size = batch_size
        self._newbie_role_name = newbie_role_name

    # -- public operations -------------------------------------------------

    async def apply_roles_to_user(
        self,
        user_id: str,
        role_names: Sequence[str],
        granted_by: str | None = None,
        reason: str = DEFAULT_GRANT_REASON,
        sync_remote: bool = True,
    ) -> OperationResult[ApplyRolesResult]:
        """Grant roles by name. All names must resolve or nothing is written."""
        return await run_operation(
            self._apply_roles(user_id, role_names, granted_by, reason, sync_remote),
            name="apply_roles_to_user",
        )

    async def remove_role_from_user(
        self,
        user_id: str,
        role_names: Sequence[str],
        revoked_by: str | None = None,
        reason: str = DEFAULT_REVOKE_REASON,
        sync_remote: bool = True,
    ) -> OperationResult[RemoveRolesResult]:
        """Revoke roles by name. Unknown or unheld names are skipped."""
        return await run_operation(
            self._remove_roles(user_id, role_names, revoked_by, reason, sync_remote),
            name="remove_role_from_user",
        )

    async def reconcile_member_roles(self, user_id: str) -> OperationResult[ReconcileResult]:
        return await run_operation(self._reconcile(user_id), name="reconcile_member_roles")

    async def bulk_apply_roles(
        self, assignments: Sequence[RoleAssignment]
    ) -> OperationResult[BulkResult[ApplyRolesResult]]:
        """Apply many assignments in batches; one failure never aborts the rest."""
        return await run_operation(self._bulk_apply(assignments), name="bulk_apply_roles")

    async def assign_newbie_role(self, user_id: str) -> OperationResult[ApplyRolesResult]:
        return await run_operation(self._assign_newbie(user_id), name="assign_newbie_role")

    # -- apply / remove ----------------------------------------------------

    async def _apply_roles(
        self,
        user_id: str,
        role_names: Sequence[str],
        granted_by: str | None,
        reason: str,
        sync_remote: bool,
    ) -> ApplyRolesResult:
        names = list(dict.fromkeys(role_names))
        applied: list[str] = []
        skipped: list[str] = []
        to_sync: list[RoleResult] = []
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException(user_id)
            found = {r.name: r for r in await uow.roles.get_by_names(names)}
            missing = [n for n in names if n not in found]
            if missing:
                raise RolesNotFoundException(missing)
            try:
                for name in names:
                    role = found[name]
                    action, _ = await uow.user_roles.grant(user_id, role.id, granted_by, reason)
                    if action == GrantAction.SKIP:
                        skipped.append(name)
                        continue
                    applied.append(name)
                    to_sync.append(role)
                    await uow.activity.record(
                        ActivityAction.ROLE_ASSIGNED
                        if action == GrantAction.INSERT
                        else ActivityAction.ROLE_REASSIGNED,
                        EntityType.USER,
                        user_id,
                        {"role_id": role.id, "role_name": name, "reason": reason},
                        actor_id=granted_by,
                    )
                await uow.commit()
            except (DuplicateAssignmentException, SQLAlchemyError):
                await uow.rollback()
                await self._record_local_failure(
                    ActivityAction.ROLE_ASSIGNMENT_FAILED, user_id, names, reason, granted_by
                )
                raise

        warnings: list[str] = []
        if sync_remote and to_sync:
            warnings = await self._sync_after_write(user_id, user.remote_user_id, to_sync)
        return ApplyRolesResult(applied_roles=applied, skipped_roles=skipped, sync_warnings=warnings)

    async def _remove_roles(
        self,
        user_id: str,
        role_names: Sequence[str],
        revoked_by: str | None,
        reason: str,
        sync_remote: bool,
    ) -> RemoveRolesResult:
        names = list(dict.fromkeys(role_names))
        revoked: list[str] = []
        skipped: list[str] = []
        to_sync: list[RoleResult] = []
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException(user_id)
            found = {r.name: r for r in await uow.roles.get_by_names(names)}
            try:
                for name in names:
                    role = found.get(name)
                    if role is None:
                        skipped.append(name)
                        continue
                    grant = await uow.user_roles.revoke(user_id, role.id, revoked_by, reason)
                    if grant is None:
                        skipped.append(name)
                        continue
                    revoked.append(name)
                    to_sync.append(role)
                    await uow.activity.record(
                        ActivityAction.ROLE_REVOKED,
                        EntityType.USER,
                        user_id,
                        {"role_id": role.id, "role_name": name, "reason": reason},
                        actor_id=revoked_by,
                    )
                await uow.commit()
            except SQLAlchemyError:
                await uow.rollback()
                await self._record_local_failure(
                    ActivityAction.ROLE_REMOVAL_FAILED, user_id, names, reason, revoked_by
                )
                raise

        warnings: list[str] = []
        if sync_remote and to_sync:
            warnings = await self._sync_after_write(user_id, user.remote_user_id, to_sync)
        return RemoveRolesResult(revoked_roles=revoked, skipped_roles=skipped, sync_warnings=warnings)

    async def _record_local_failure(
        self,
        action: ActivityAction,
        user_id: str,
        names: list[str],
        reason: str,
        actor_id: str | None,
    ) -> None:
        logger.error("Local role write failed for user %s: %s (%s)", user_id, names, action.value)
        await record_activity(
            self._uow_factory,
            [(action, EntityType.USER, user_id, {"role_names": names, "reason": reason})],
            actor_id=actor_id,
        )

    async def _sync_after_write(
        self, user_id: str, remote_user_id: str | None, changed: list[RoleResult]
    ) -> list[str]:
        """Reconcile the member's whole role set; return warnings for what did not sync."""
        if not remote_user_id:
            return [f"User {user_id} has no linked Discord account; roles not synced"]
        warnings = [
            f"Role {role.name} is not synced to Discord"
            for role in changed
            if not role.remote_role_id
        ]
        try:
            outcome = await self._reconcile(user_id)
        except RemoteSyncError as exc:
            logger.warning("Role sync for user %s failed: %s", user_id, exc.message)
            return [*warnings, f"Discord role sync failed: {exc.message}"]
        if isinstance(outcome, OperationResult):
            return [*warnings, f"User {user_id} is not in the Discord guild; roles not synced"]
        warnings.extend(
            f"Failed to {e.operation} Discord role {e.role_name}: {e.message}"
            for e in outcome.errors
        )
        return warnings

    # -- reconcile ---------------------------------------------------------

    async def _reconcile(self, user_id: str) -> ReconcileResult | OperationResult[ReconcileResult]:
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException(user_id)
            active = await uow.user_roles.get_active_roles(user_id)
            platform = {r.name: r for r in await uow.roles.list_synced()}

        absent = OperationResult.fail(
            REMOTE_ACTOR_NOT_PRESENT,
            "User is not linked to a Discord account in the guild",
            {"user_id": user_id},
            data=ReconcileResult(added=[], removed=[], errors=[], actor_present=False),
        )
        if not user.remote_user_id:
            return absent
        remote_names = await self._adapter.get_member_current_managed_roles(user.remote_user_id)
        if remote_names is None:
            return absent

        desired = {r.name for r in active if r.remote_role_id}
        current = remote_names & set(platform)
        added: list[str] = []
        removed: list[str] = []
        errors: list[RoleSyncError] = []
        for name in sorted(desired - current):
            try:
                await self._adapter.add_member_to_role(
                    user.remote_user_id, platform[name].remote_role_id
                )
                added.append(name)
            except RemoteSyncError as exc:
                logger.warning(
                    "Reconcile add of %s failed for user %s: %s", name, user_id, exc.message
                )
                errors.append(RoleSyncError(role_name=name, operation="add", message=exc.message))
        for name in sorted(current - desired):
            try:
                await self._adapter.remove_member_from_role(
                    user.remote_user_id, platform[name].remote_role_id
                )
                removed.append(name)
            except RemoteSyncError as exc:
                logger.warning(
                    "Reconcile removal of %s failed for user %s: %s", name, user_id, exc.message
                )
                errors.append(
                    RoleSyncError(role_name=name, operation="remove", message=exc.message)
                )

        details: dict[str, Any] = {"added": added, "removed": removed}
        if errors:
            details["errors"] = [f"{e.operation} {e.role_name}: {e.message}" for e in errors]
        await record_activity(
            self._uow_factory,
            [
                (
                    ActivityAction.DISCORD_ROLE_SYNC_FAILED
                    if errors
                    else ActivityAction.DISCORD_ROLE_SYNC_SUCCESS,
                    EntityType.USER,
                    user_id,
                    details,
                )
            ],
        )
        logger.info(
            "Reconciled roles for user %s: added=%s removed=%s errors=%d",
            user_id,
            added,
            removed,
            len(errors),
        )
        return ReconcileResult(added=added, removed=removed, errors=errors)

    # -- bulk / newbie -----------------------------------------------------

    async def _bulk_apply(
        self, assignments: Sequence[RoleAssignment]
    ) -> BulkResult[ApplyRolesResult]:
        async def apply_one(a: RoleAssignment) -> OperationResult[ApplyRolesResult]:
            return await self.apply_roles_to_user(
                a.user_id,
                a.role_names,
                granted_by=a.granted_by,
                reason=a.reason or DEFAULT_GRANT_REASON,
                sync_remote=a.sync_remote,
            )

        outcomes = await gather_in_batches(list(assignments), self._batch_size, apply_one)
        results: list[BulkItem[ApplyRolesResult]] = []
        errors: list[BulkItemError] = []
        for assignment, outcome in zip(assignments, outcomes, strict=True):
            if outcome.success:
                results.append(BulkItem(user_id=assignment.user_id, result=outcome.data))
            else:
                errors.append(
                    BulkItemError(
                        user_id=assignment.user_id,
                        code=outcome.error.code,
                        message=outcome.error.message,
                    )
                )
        logger.info("Bulk role assignment: %d succeeded, %d failed", len(results), len(errors))
        return BulkResult(success=len(results), failed=len(errors), results=results, errors=errors)

    async def _assign_newbie(self, user_id: str) -> OperationResult[ApplyRolesResult]:
        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_name(self._newbie_role_name)
        if role is None:
            raise NewbieRoleNotConfiguredException(self._newbie_role_name)
        return await self.apply_roles_to_user(
            user_id, [self._newbie_role_name], reason=NEWBIE_GRANT_REASON
        )
