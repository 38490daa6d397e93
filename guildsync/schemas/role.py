"""Role and user-role API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guildsync.infrastructure.external.discord.permissions import is_known_permission
from guildsync.schemas.common import BulkItemErrorResponse
from guildsync.shared.utils.colors import HEX_COLOR_PATTERN


def _check_permissions(value: list[str] | None) -> list[str] | None:
    if value is None:
        return value
    unknown = [p for p in value if not is_known_permission(p)]
    if unknown:
        raise ValueError(f"Unknown Discord permissions: {', '.join(unknown)}")
    return [p.upper() for p in value]


class RoleCreateRequest(BaseModel):
    """Request body for creating a role."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN.pattern)
    sort_order: int = Field(default=0, ge=0)
    is_system_role: bool = False
    permissions: list[str] = Field(default_factory=list, max_length=64)
    hoist: bool = False
    mentionable: bool = False

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, value: list[str] | None) -> list[str] | None:
        return _check_permissions(value)


class RoleUpdateRequest(BaseModel):
    """Request body for updating a role (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN.pattern)
    sort_order: int | None = Field(default=None, ge=0)
    permissions: list[str] | None = Field(default=None, max_length=64)
    hoist: bool | None = None
    mentionable: bool | None = None

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, value: list[str] | None) -> list[str] | None:
        return _check_permissions(value)


class RoleResponse(BaseModel):
    """Role list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    color: str | None
    sort_order: int
    is_system_role: bool
    remote_role_id: str | None
    is_archived: bool
    permissions: list[str]
    hoist: bool
    mentionable: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleMutationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: RoleResponse
    sync_warnings: list[str] = Field(default_factory=list)


class RoleListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[RoleResponse]
    total: int
    page: int
    limit: int


class ApplyRolesRequest(BaseModel):
    """Request body for POST /users/{user_id}/roles."""

    role_names: list[str] = Field(..., min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=500)
    sync_remote: bool = True


class ApplyRolesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    applied_roles: list[str]
    skipped_roles: list[str]
    sync_warnings: list[str]


class RemoveRolesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    revoked_roles: list[str]
    skipped_roles: list[str]
    sync_warnings: list[str]


class RoleSyncErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role_name: str
    operation: str
    message: str


class ReconcileResponse(BaseModel):
    """Response for POST /users/{user_id}/roles/sync."""

    model_config = ConfigDict(from_attributes=True)

    added: list[str]
    removed: list[str]
    errors: list[RoleSyncErrorResponse]
    actor_present: bool


class BulkRoleAssignmentItem(BaseModel):
    user_id: str = Field(..., min_length=1)
    role_names: list[str] = Field(..., min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=500)
    sync_remote: bool = True


class BulkRoleAssignmentRequest(BaseModel):
    """Request body for POST /users/roles/bulk."""

    assignments: list[BulkRoleAssignmentItem] = Field(..., min_length=1, max_length=500)


class BulkApplyItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    result: ApplyRolesResponse


class BulkApplyRolesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: int
    failed: int
    results: list[BulkApplyItemResponse]
    errors: list[BulkItemErrorResponse]
