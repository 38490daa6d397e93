"""Tag and user-tag API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from guildsync.core.constants import DEFAULT_TAG_COLOR, DEFAULT_TAG_ICON, TAG_NAME_PATTERN
from guildsync.domain.enums import TagCategory
from guildsync.schemas.common import BulkItemErrorResponse
from guildsync.shared.utils.colors import HEX_COLOR_PATTERN


class TagCreateRequest(BaseModel):
    """Request body for creating a tag. name is lowercase snake_case."""

    name: str = Field(..., min_length=1, max_length=50, pattern=TAG_NAME_PATTERN)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    category: TagCategory = TagCategory.SKILL
    color: str = Field(default=DEFAULT_TAG_COLOR, pattern=HEX_COLOR_PATTERN.pattern)
    icon: str = Field(default=DEFAULT_TAG_ICON, max_length=16)
    is_active: bool = True
    is_assignable: bool = True
    is_earnable: bool = False


class TagUpdateRequest(BaseModel):
    """Request body for updating a tag (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=50, pattern=TAG_NAME_PATTERN)
    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    category: TagCategory | None = None
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN.pattern)
    icon: str | None = Field(default=None, max_length=16)
    is_active: bool | None = None
    is_assignable: bool | None = None
    is_earnable: bool | None = None


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    display_name: str
    description: str | None
    category: TagCategory
    color: str
    icon: str
    is_active: bool
    is_assignable: bool
    is_earnable: bool
    remote_role_id: str | None
    is_archived: bool
    created_at: datetime | None = None


class TagListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[TagResponse]
    total: int
    page: int
    limit: int


class TagMutationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tag: TagResponse
    sync_warnings: list[str] = Field(default_factory=list)


class UserTagResponse(BaseModel):
    """One user-tag grant with its tag."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    tag: TagResponse
    granted_at: datetime
    granted_by: str | None
    grant_reason: str
    revoked_at: datetime | None
    is_primary: bool
    notes: str | None
    is_active: bool


class AssignTagRequest(BaseModel):
    """Request body for POST /users/{user_id}/tags."""

    tag_name: str = Field(..., min_length=1, max_length=50)
    reason: str | None = Field(default=None, max_length=500)
    is_primary: bool = False
    notes: str | None = Field(default=None, max_length=1000)
    sync_remote: bool = True


class TagAssignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_tag: UserTagResponse
    skipped: bool
    sync_warnings: list[str]


class TagRemoveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tag_name: str
    removed: bool
    skipped: bool
    sync_warnings: list[str]


class SetPrimaryTagRequest(BaseModel):
    tag_name: str = Field(..., min_length=1, max_length=50)


class TagSyncResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    removed: list[str]
    added: list[str]
    errors: list[str]
    actor_present: bool


class BulkAssignTagRequest(BaseModel):
    """Request body for POST /tags/{tag_name}/bulk-assign."""

    user_ids: list[str] = Field(..., min_length=1, max_length=500)
    reason: str | None = Field(default=None, max_length=500)


class BulkTagItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    result: TagAssignResponse


class BulkAssignTagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: int
    failed: int
    results: list[BulkTagItemResponse]
    errors: list[BulkItemErrorResponse]
