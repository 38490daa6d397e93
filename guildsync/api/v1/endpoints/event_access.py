"""Event voice access API: request, revoke, status, eligibility, admin grant, cleanup."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_event_access_service,
    require_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.use_cases.events import EventAccessService
from guildsync.core.limiter import limit_writes
from guildsync.domain.exceptions import AuthorizationException
from guildsync.schemas.event import (
    AccessStatusResponse,
    AdminGrantRequest,
    CleanupResponse,
    EligibilityResponse,
    EventAccessGrantResponse,
    EventAccessRevokeResponse,
)

router = APIRouter()


@router.post("/{event_id}/access", response_model=EventAccessGrantResponse)
@limit_writes
async def request_access(
    request: Request,
    event_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
):
    """Request voice access to the event channel for the caller."""
    result = await service.request_event_access(event_id, actor.id)
    return EventAccessGrantResponse.model_validate(unwrap(result))


@router.delete("/{event_id}/access", response_model=EventAccessRevokeResponse)
@limit_writes
async def revoke_access(
    request: Request,
    event_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
    user_id: str | None = None,
):
    """Leave an event, or (admins) revoke another user's access and disconnect them."""
    target = user_id or actor.id
    if target != actor.id and not actor.is_admin:
        raise AuthorizationException()
    reason = "manual" if target == actor.id else "admin_revoked"
    result = await service.revoke_event_access(event_id, target, reason, revoked_by=actor.id)
    return EventAccessRevokeResponse.model_validate(unwrap(result))


@router.get("/{event_id}/access", response_model=AccessStatusResponse)
async def access_status(
    event_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
):
    result = await service.get_user_access_status(event_id, actor.id)
    return AccessStatusResponse.model_validate(unwrap(result))


@router.get("/{event_id}/eligibility", response_model=EligibilityResponse)
async def eligibility(
    event_id: str,
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
):
    """Which prerequisites the caller still lacks for this event."""
    result = await service.check_event_eligibility(event_id, actor.id)
    return EligibilityResponse.model_validate(unwrap(result))


@router.post("/{event_id}/access/admin-grant", response_model=EventAccessGrantResponse)
@limit_writes
async def admin_grant_access(
    request: Request,
    event_id: str,
    body: AdminGrantRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
):
    """Grant access regardless of status, timing, prerequisites and capacity."""
    result = await service.admin_grant_access(event_id, body.user_id, actor.id)
    return EventAccessGrantResponse.model_validate(unwrap(result))


@router.post("/{event_id}/cleanup", response_model=CleanupResponse)
@limit_writes
async def cleanup_event(
    request: Request,
    event_id: str,
    _: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[EventAccessService, Depends(get_event_access_service)],
):
    """End the event: revoke all access and drop the temporary role."""
    return CleanupResponse.model_validate(unwrap(await service.cleanup_event(event_id)))
