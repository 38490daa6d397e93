"""Roles API: list, get, create, update, archive. Writes are admin-only."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request

from guildsync.api.v1.dependencies import (
    CurrentActor,
    get_current_actor,
    get_role_service,
    require_admin,
)
from guildsync.api.v1.results import unwrap
from guildsync.application.dtos.role import RoleCreate, RoleListFilter, RoleUpdate
from guildsync.application.services import RoleService
from guildsync.core.limiter import limit_writes
from guildsync.schemas.role import (
    RoleCreateRequest,
    RoleListResponse,
    RoleMutationResponse,
    RoleResponse,
    RoleUpdateRequest,
)

router = APIRouter()


@router.post("", response_model=RoleMutationResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[RoleService, Depends(get_role_service)],
):
    """Create a role and mirror it to the guild."""
    data = RoleCreate(**{**body.model_dump(), "permissions": tuple(body.permissions)})
    result = await service.create_role(data, actor_id=actor.id)
    return RoleMutationResponse.model_validate(unwrap(result))


@router.get("", response_model=RoleListResponse)
async def list_roles(
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[RoleService, Depends(get_role_service)],
    search: str | None = None,
    is_system_role: bool | None = None,
    include_archived: bool = False,
    sort_by: Literal["name", "sort_order", "created_at"] = "sort_order",
    sort_order: Literal["asc", "desc"] = "asc",
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
):
    """List roles (search on name and description, paginated)."""
    filters = RoleListFilter(
        search=search,
        is_system_role=is_system_role,
        include_archived=include_archived,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return RoleListResponse.model_validate(unwrap(await service.list_roles(filters)))


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    _: Annotated[CurrentActor, Depends(get_current_actor)],
    service: Annotated[RoleService, Depends(get_role_service)],
):
    return RoleResponse.model_validate(unwrap(await service.get_role(role_id)))


@router.patch("/{role_id}", response_model=RoleMutationResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdateRequest,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[RoleService, Depends(get_role_service)],
):
    """Partially update a role; mirrored attributes are pushed to the guild role."""
    values = body.model_dump(exclude_unset=True, exclude_none=True)
    if "permissions" in values:
        values["permissions"] = tuple(values["permissions"])
    result = await service.update_role(role_id, RoleUpdate(**values), actor_id=actor.id)
    return RoleMutationResponse.model_validate(unwrap(result))


@router.delete("/{role_id}", response_model=RoleMutationResponse)
@limit_writes
async def archive_role(
    request: Request,
    role_id: str,
    actor: Annotated[CurrentActor, Depends(require_admin)],
    service: Annotated[RoleService, Depends(get_role_service)],
):
    """Archive a role that nobody holds and delete its guild role."""
    result = await service.archive_role(role_id, actor_id=actor.id)
    return RoleMutationResponse.model_validate(unwrap(result))
