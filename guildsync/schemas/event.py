"""Event and event access API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from guildsync.domain.enums import EventStatus, EventType, VoiceAccessStatus


class EventCreateRequest(BaseModel):
    """Request body for creating an event (starts as scheduled)."""

    title: str = Field(..., min_length=1, max_length=200)
    scheduled_at: datetime
    description: str | None = Field(default=None, max_length=2000)
    event_type: EventType = EventType.VOICE
    difficulty_level: str | None = Field(default=None, max_length=50)
    duration_minutes: int | None = Field(default=None, ge=1)
    capacity: int | None = Field(default=None, ge=1)
    prerequisite_roles: list[str] = Field(default_factory=list, max_length=20)
    remote_channel_id: str | None = Field(default=None, max_length=32)
    create_event_role: bool = False
    create_remote_event: bool = False


class EventUpdateRequest(BaseModel):
    """Request body for updating an event (partial). status follows the transition table."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    difficulty_level: str | None = Field(default=None, max_length=50)
    scheduled_at: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=1)
    capacity: int | None = Field(default=None, ge=1)
    prerequisite_roles: list[str] | None = Field(default=None, max_length=20)
    remote_channel_id: str | None = Field(default=None, max_length=32)
    status: EventStatus | None = None


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    event_type: EventType
    difficulty_level: str | None
    status: EventStatus
    scheduled_at: datetime
    duration_minutes: int | None
    capacity: int | None
    prerequisite_roles: list[str]
    remote_channel_id: str | None
    remote_event_id: str | None
    event_role_id: str | None
    created_by: str | None
    created_at: datetime | None = None


class EventListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: list[EventResponse]
    total: int
    page: int
    limit: int


class EventMutationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event: EventResponse
    sync_warnings: list[str] = Field(default_factory=list)


class EventAccessGrantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    has_access: bool
    voice_channel_id: str | None
    event_title: str
    already_had_access: bool
    sync_warnings: list[str]


class EventAccessRevokeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    has_access: bool
    revoked: bool
    disconnected: bool
    sync_warnings: list[str]


class AdminGrantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class MissingTagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None
    name: str
    display_name: str
    color: str | None
    icon: str | None


class EligibilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_eligible: bool
    has_all_required_tags: bool
    missing_tags: list[MissingTagResponse]
    user_tags: list[str]


class VoiceAccessResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    user_id: str
    status: VoiceAccessStatus
    granted_at: datetime
    granted_by: str | None
    revoked_at: datetime | None
    revoke_reason: str | None


class AccessStatusResponse(BaseModel):
    """Response for GET /events/{id}/access."""

    model_config = ConfigDict(from_attributes=True)

    has_access: bool
    access_details: VoiceAccessResponse | None
    eligibility: EligibilityResponse


class CleanupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    users_revoked: int
    discord_role_deleted: bool
    errors: int
    event_status: EventStatus
