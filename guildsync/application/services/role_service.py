"""Role application service: role store CRUD mirrored to guild roles.

Local writes commit first; the remote mirror runs afterwards and a failure
there becomes a sync warning instead of undoing the local change.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from guildsync.application.dtos.result import OperationResult
from guildsync.application.dtos.role import (
    RoleCreate,
    RoleList,
    RoleListFilter,
    RoleMutationResult,
    RoleResult,
    RoleUpdate,
)
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import UnitOfWorkFactory, run_operation
from guildsync.core.constants import DEFAULT_ROLES
from guildsync.domain.exceptions import (
    RemoteSyncError,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    RoleInUseException,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger
from guildsync.shared.utils.colors import hex_to_int

logger = get_logger(__name__)

# Role attributes that exist on the guild role too.
_MIRRORED_FIELDS = ("name", "color", "permissions", "hoist", "mentionable")


class RoleService:
    """Create, update, archive and list platform roles."""

    def __init__(self, uow_factory: UnitOfWorkFactory, adapter: IRemoteGuildAdapter) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter

    async def create_role(
        self, data: RoleCreate, actor_id: str | None = None
    ) -> OperationResult[RoleMutationResult]:
        return await run_operation(self._create_role(data, actor_id), name="create_role")

    async def update_role(
        self, role_id: str, patch: RoleUpdate, actor_id: str | None = None
    ) -> OperationResult[RoleMutationResult]:
        return await run_operation(
            self._update_role(role_id, patch, actor_id), name="update_role"
        )

    async def archive_role(
        self, role_id: str, actor_id: str | None = None
    ) -> OperationResult[RoleMutationResult]:
        return await run_operation(self._archive_role(role_id, actor_id), name="archive_role")

    async def get_role(self, role_id: str) -> OperationResult[RoleResult]:
        return await run_operation(self._get_role(role_id), name="get_role")

    async def list_roles(self, filters: RoleListFilter) -> OperationResult[RoleList]:
        return await run_operation(self._list_roles(filters), name="list_roles")

    async def seed_default_roles(self, *, sync_remote: bool = False) -> OperationResult[list[str]]:
        """Create any missing default roles; return the names created."""
        return await run_operation(
            self._seed_default_roles(sync_remote), name="seed_default_roles"
        )

    async def _create_role(self, data: RoleCreate, actor_id: str | None) -> RoleMutationResult:
        async with self._uow_factory() as uow:
            if await uow.roles.get_by_name(data.name):
                raise RoleAlreadyExistsException(data.name)
            role = await uow.roles.create_role(data)
            await uow.activity.record(
                ActivityAction.ROLE_CREATED,
                EntityType.ROLE,
                role.id,
                {"name": role.name, "is_system_role": role.is_system_role},
                actor_id=actor_id,
            )
            await uow.commit()
        logger.info("Role created: %s (%s)", role.name, role.id)

        warnings: list[str] = []
        role = await self._mirror_new_role(role, warnings)
        return RoleMutationResult(role=role, sync_warnings=warnings)

    async def _mirror_new_role(self, role: RoleResult, warnings: list[str]) -> RoleResult:
        try:
            remote_role_id = await self._adapter.ensure_role_exists(
                role.name,
                hex_to_int(role.color),
                list(role.permissions),
                role.hoist,
                role.mentionable,
            )
        except RemoteSyncError as exc:
            logger.warning("Failed to create Discord role for %s: %s", role.name, exc.message)
            warnings.append(f"Failed to create Discord role {role.name}: {exc.message}")
            return role
        async with self._uow_factory() as uow:
            await uow.roles.set_remote_role_id(role.id, remote_role_id)
            await uow.commit()
        return replace(role, remote_role_id=remote_role_id)

    async def _update_role(
        self, role_id: str, patch: RoleUpdate, actor_id: str | None
    ) -> RoleMutationResult:
        changes = patch.changed_fields()
        async with self._uow_factory() as uow:
            current = await uow.roles.get_by_id(role_id)
            if current is None or current.is_archived:
                raise ResourceNotFoundException("role", role_id)
            if patch.name and patch.name != current.name:
                if await uow.roles.get_by_name(patch.name):
                    raise RoleAlreadyExistsException(patch.name)
            updated = await uow.roles.update_role(role_id, patch)
            if updated is None:
                raise ResourceNotFoundException("role", role_id)
            await uow.activity.record(
                ActivityAction.ROLE_UPDATED,
                EntityType.ROLE,
                role_id,
                {"changes": changes, "previous_name": current.name},
                actor_id=actor_id,
            )
            await uow.commit()

        warnings: list[str] = []
        mirrored: dict[str, Any] = {k: v for k, v in changes.items() if k in _MIRRORED_FIELDS}
        if updated.remote_role_id and mirrored:
            if "color" in mirrored:
                mirrored["color"] = hex_to_int(mirrored["color"])
            if "permissions" in mirrored:
                mirrored["permissions"] = list(mirrored["permissions"])
            try:
                await self._adapter.update_role(updated.remote_role_id, mirrored)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to update Discord role %s (%s): %s",
                    updated.name,
                    updated.remote_role_id,
                    exc.message,
                )
                warnings.append(f"Failed to update Discord role {updated.name}: {exc.message}")
        return RoleMutationResult(role=updated, sync_warnings=warnings)

    async def _archive_role(self, role_id: str, actor_id: str | None) -> RoleMutationResult:
        async with self._uow_factory() as uow:
            current = await uow.roles.get_by_id(role_id)
            if current is None or current.is_archived:
                raise ResourceNotFoundException("role", role_id)
            active_grants = await uow.user_roles.count_active_for_role(role_id)
            if active_grants:
                raise RoleInUseException(current.name, active_grants)
            archived = await uow.roles.archive(role_id)
            await uow.activity.record(
                ActivityAction.ROLE_DELETED,
                EntityType.ROLE,
                role_id,
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
                    "Failed to delete Discord role %s (%s): %s",
                    current.name,
                    current.remote_role_id,
                    exc.message,
                )
                warnings.append(f"Failed to delete Discord role {current.name}: {exc.message}")
            else:
                async with self._uow_factory() as uow:
                    await uow.roles.set_remote_role_id(role_id, None)
                    await uow.commit()
                archived = replace(archived, remote_role_id=None)
        return RoleMutationResult(role=archived, sync_warnings=warnings)

    async def _get_role(self, role_id: str) -> RoleResult:
        async with self._uow_factory() as uow:
            role = await uow.roles.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        return role

    async def _list_roles(self, filters: RoleListFilter) -> RoleList:
        async with self._uow_factory() as uow:
            items, total = await uow.roles.list_roles(filters)
        return RoleList(items=items, total=total, page=filters.page, limit=filters.limit)

    async def _seed_default_roles(self, sync_remote: bool) -> list[str]:
        created: list[RoleResult] = []
        async with self._uow_factory() as uow:
            for spec in DEFAULT_ROLES:
                if await uow.roles.get_by_name(spec["name"], include_archived=True):
                    continue
                data = RoleCreate(**{**spec, "permissions": tuple(spec["permissions"])})
                role = await uow.roles.create_role(data)
                await uow.activity.record(
                    ActivityAction.ROLE_CREATED,
                    EntityType.ROLE,
                    role.id,
                    {"name": role.name, "is_system_role": role.is_system_role, "seeded": True},
                )
                created.append(role)
            await uow.commit()
        logger.info("Seeded %d default roles", len(created))

        if sync_remote:
            warnings: list[str] = []
            for role in created:
                await self._mirror_new_role(role, warnings)
            for warning in warnings:
                logger.warning(warning)
        return [role.name for role in created]
