"""User roles API: apply, remove, reconcile and bulk apply."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_role_engine,
    require_admin,
    require_self_or_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.dtos.role import RoleAssignment
from guildsync.application.use_cases.roles import RoleReconciliationEngine
from guildsync.application.use_cases.roles.role_reconciliation import REMOTE_ACTOR_NOT_PRESENT
from guildsync.core.constants import DEFAULT_GRANT_REASON, DEFAULT_REVOKE_REASON
from guildsync.core.limiter import limit_bulk, limit_writes
from guildsync.schemas.role import (
    ApplyRolesRequest,
    ApplyRolesResponse,
    BulkApplyRolesResponse,
    BulkRoleAssignmentRequest,
    ReconcileResponse,
    RemoveRolesResponse,
)

router = APIRouter()


@router.post("/roles/bulk", response_model=BulkApplyRolesResponse)
@limit_bulk
async def bulk_apply_roles(
    request: Request,
    body: BulkRoleAssignmentRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[RoleReconciliationEngine, Depends(get_role_engine)],
):
    """Apply roles to many users; per-user failures are reported, not raised."""
    assignments = [
        RoleAssignment(
            user_id=item.user_id,
            role_names=tuple(item.role_names),
            granted_by=actor.id,
            reason=item.reason,
            sync_remote=item.sync_remote,
        )
        for item in body.assignments
    ]
    result = await engine.bulk_apply_roles(assignments)
    return BulkApplyRolesResponse.model_validate(unwrap(result))


@router.post("/{user_id}/roles", response_model=ApplyRolesResponse)
@limit_writes
async def apply_roles(
    request: Request,
    user_id: str,
    body: ApplyRolesRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[RoleReconciliationEngine, Depends(get_role_engine)],
):
    """Grant roles by name; roles already held are reported as skipped."""
    result = await engine.apply_roles_to_user(
        user_id,
        body.role_names,
        granted_by=actor.id,
        reason=body.reason or DEFAULT_GRANT_REASON,
        sync_remote=body.sync_remote,
    )
    return ApplyRolesResponse.model_validate(unwrap(result))


@router.delete("/{user_id}/roles", response_model=RemoveRolesResponse)
@limit_writes
async def remove_roles(
    request: Request,
    user_id: str,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[RoleReconciliationEngine, Depends(get_role_engine)],
    role_names: Annotated[list[str], Query(min_length=1)],
    reason: str | None = None,
    sync_remote: bool = True,
):
    """Revoke roles by name; unknown or unheld roles are reported as skipped."""
    result = await engine.remove_role_from_user(
        user_id,
        role_names,
        revoked_by=actor.id,
        reason=reason or DEFAULT_REVOKE_REASON,
        sync_remote=sync_remote,
    )
    return RemoveRolesResponse.model_validate(unwrap(result))


@router.post("/{user_id}/roles/sync", response_model=ReconcileResponse)
@limit_writes
async def reconcile_roles(
    request: Request,
    user_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    engine: Annotated[RoleReconciliationEngine, Depends(get_role_engine)],
):
    """Converge the member's guild roles to their active grants."""
    require_self_or_admin(actor, user_id)
    result = await engine.reconcile_member_roles(user_id)
    return ReconcileResponse.model_validate(
        unwrap(result, soft_codes=(REMOTE_ACTOR_NOT_PRESENT,))
    )


@router.post("/{user_id}/roles/newbie", response_model=ApplyRolesResponse)
@limit_writes
async def assign_newbie_role(
    request: Request,
    user_id: str,
    _: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[RoleReconciliationEngine, Depends(get_role_engine)],
):
    """Give a newly registered user the newcomer role."""
    return ApplyRolesResponse.model_validate(unwrap(await engine.assign_newbie_role(user_id)))
