"""Events API: list, get, create, update, archive. Writes are admin-only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_event_service,
    require_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.dtos.event import EventCreate, EventListFilter, EventUpdate
from guildsync.application.use_cases.events import EventService
from guildsync.core.limiter import limit_writes
from guildsync.domain.enums import EventStatus
from guildsync.schemas.event import (
    EventCreateRequest,
    EventListResponse,
    EventMutationResponse,
    EventResponse,
    EventUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=EventMutationResponse, status_code=201)
@limit_writes
async def create_event(
    request: Request,
    body: EventCreateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[EventService, Depends(get_event_service)],
):
    """Create an event; optionally create its temporary role and guild scheduled event."""
    data = EventCreate(
        **{**body.model_dump(), "prerequisite_roles": tuple(body.prerequisite_roles)}
    )
    result = await service.create_event(data, created_by=actor.id)
    return EventMutationResponse.model_validate(unwrap(result))


@router.get("", response_model=EventListResponse)
async def list_events(
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventService, Depends(get_event_service)],
    status: EventStatus | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
):
    filters = EventListFilter(status=status, page=page, limit=limit)
    return EventListResponse.model_validate(unwrap(await service.list_events(filters)))


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[EventService, Depends(get_event_service)],
):
    return EventResponse.model_validate(unwrap(await service.get_event(event_id)))


@router.patch("/{event_id}", response_model=EventMutationResponse)
@limit_writes
async def update_event(
    request: Request,
    event_id: str,
    body: EventUpdateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[EventService, Depends(get_event_service)],
):
    """Partially update an event; status changes must follow the transition table."""
    values = body.model_dump(exclude_unset=True, exclude_none=True)
    if "prerequisite_roles" in values:
        values["prerequisite_roles"] = tuple(values["prerequisite_roles"])
    result = await service.update_event(event_id, EventUpdate(**values), actor_id=actor.id)
    return EventMutationResponse.model_validate(unwrap(result))


@router.delete("/{event_id}", response_model=EventMutationResponse)
@limit_writes
async def archive_event(
    request: Request,
    event_id: str,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[EventService, Depends(get_event_service)],
):
    """Revoke all access, archive the event and delete its guild scheduled event."""
    result = await service.archive_event(event_id, actor_id=actor.id)
    return EventMutationResponse.model_validate(unwrap(result))
