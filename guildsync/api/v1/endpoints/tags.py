"""Tags API: list, get, create, update, archive, and bulk assignment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_tag_engine,
    get_tag_service,
    require_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.dtos.tag import TagCreate, TagListFilter, TagUpdate
from guildsync.application.services import TagService
from guildsync.application.use_cases.tags import TagReconciliationEngine
from guildsync.core.constants import DEFAULT_TAG_GRANT_REASON
from guildsync.core.limiter import limit_bulk, limit_writes
from guildsync.domain.enums import TagCategory
from guildsync.schemas.tag import (
    BulkAssignTagRequest,
    BulkAssignTagResponse,
    TagCreateRequest,
    TagListResponse,
    TagMutationResponse,
    TagResponse,
    TagUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=TagResponse, status_code=201)
@limit_writes
async def create_tag(
    request: Request,
    body: TagCreateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
):
    result = await service.create_tag(TagCreate(**body.model_dump()), actor_id=actor.id)
    return TagResponse.model_validate(unwrap(result))


@router.get("", response_model=TagListResponse)
async def list_tags(
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[TagService, Depends(get_tag_service)],
    search: str | None = None,
    category: TagCategory | None = None,
    assignable_only: bool = False,
    include_archived: bool = False,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
):
    """List tags filtered by category, assignability and search text."""
    filters = TagListFilter(
        search=search,
        category=category,
        assignable_only=assignable_only,
        include_archived=include_archived,
        page=page,
        limit=limit,
    )
    return TagListResponse.model_validate(unwrap(await service.list_tags(filters)))


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(
    tag_id: str,
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[TagService, Depends(get_tag_service)],
):
    return TagResponse.model_validate(unwrap(await service.get_tag(tag_id)))


@router.patch("/{tag_id}", response_model=TagMutationResponse)
@limit_writes
async def update_tag(
    request: Request,
    tag_id: str,
    body: TagUpdateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
):
    """Partially update a tag; display changes resync every holder."""
    patch = TagUpdate(**body.model_dump(exclude_unset=True, exclude_none=True))
    result = await service.update_tag(tag_id, patch, actor_id=actor.id)
    return TagMutationResponse.model_validate(unwrap(result))


@router.delete("/{tag_id}", response_model=TagMutationResponse)
@limit_writes
async def archive_tag(
    request: Request,
    tag_id: str,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
):
    result = await service.archive_tag(tag_id, actor_id=actor.id)
    return TagMutationResponse.model_validate(unwrap(result))


@router.post("/{tag_name}/bulk-assign", response_model=BulkAssignTagResponse)
@limit_bulk
async def bulk_assign_tag(
    request: Request,
    tag_name: str,
    body: BulkAssignTagRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
):
    """Assign one tag to many users; per-user failures are reported, not raised."""
    result = await engine.bulk_assign_tag(
        body.user_ids,
        tag_name,
        granted_by=actor.id,
        reason=body.reason or DEFAULT_TAG_GRANT_REASON,
    )
    return BulkAssignTagResponse.model_validate(unwrap(result))
