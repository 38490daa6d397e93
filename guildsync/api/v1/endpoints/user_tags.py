"""User tags API: assign, remove, primary tag and guild sync."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_tag_engine,
    require_admin,
    require_self_or_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.use_cases.tags import TagReconciliationEngine
from guildsync.application.use_cases.tags.tag_reconciliation import REMOTE_ACTOR_NOT_PRESENT
from guildsync.core.constants import DEFAULT_TAG_GRANT_REASON, DEFAULT_TAG_REVOKE_REASON
from guildsync.core.limiter import limit_writes
from guildsync.schemas.tag import (
    AssignTagRequest,
    SetPrimaryTagRequest,
    TagAssignResponse,
    TagRemoveResponse,
    TagSyncResponse,
    UserTagResponse,
)

router = APIRouter()


@router.post("/{user_id}/tags", response_model=TagAssignResponse)
@limit_writes
async def assign_tag(
    request: Request,
    user_id: str,
    body: AssignTagRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
):
    result = await engine.assign_tag_to_user(
        user_id,
        body.tag_name,
        granted_by=actor.id,
        reason=body.reason or DEFAULT_TAG_GRANT_REASON,
        is_primary=body.is_primary,
        notes=body.notes,
        sync_remote=body.sync_remote,
    )
    return TagAssignResponse.model_validate(unwrap(result))


@router.delete("/{user_id}/tags/{tag_name}", response_model=TagRemoveResponse)
@limit_writes
async def remove_tag(
    request: Request,
    user_id: str,
    tag_name: str,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
    reason: str | None = None,
    sync_remote: bool = True,
):
    result = await engine.remove_tag_from_user(
        user_id,
        tag_name,
        revoked_by=actor.id,
        reason=reason or DEFAULT_TAG_REVOKE_REASON,
        sync_remote=sync_remote,
    )
    return TagRemoveResponse.model_validate(unwrap(result))


@router.put("/{user_id}/tags/primary", response_model=UserTagResponse)
@limit_writes
async def set_primary_tag(
    request: Request,
    user_id: str,
    body: SetPrimaryTagRequest,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
):
    """Choose which held tag is displayed as the user's primary tag."""
    require_self_or_admin(actor, user_id)
    result = await engine.set_primary_tag(user_id, body.tag_name, actor_id=actor.id)
    return UserTagResponse.model_validate(unwrap(result))


@router.post("/{user_id}/tags/sync", response_model=TagSyncResponse)
@limit_writes
async def sync_tags(
    request: Request,
    user_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
):
    """Replace the member's guild tag roles with their active tags."""
    require_self_or_admin(actor, user_id)
    result = await engine.sync_user_tags_with_discord(user_id)
    return TagSyncResponse.model_validate(unwrap(result, soft_codes=(REMOTE_ACTOR_NOT_PRESENT,)))
