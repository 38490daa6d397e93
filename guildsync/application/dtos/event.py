"""DTOs for event management and event access use cases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from guildsync.domain.enums import EventStatus, EventType, VoiceAccessStatus


@dataclass(frozen=True)
class EventResult:
    """Event read-model."""

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
    is_archived: bool
    created_by: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class EventCreate:
    title: str
    scheduled_at: datetime
    description: str | None = None
    event_type: EventType = EventType.VOICE
    difficulty_level: str | None = None
    duration_minutes: int | None = None
    capacity: int | None = None
    prerequisite_roles: tuple[str, ...] = ()
    remote_channel_id: str | None = None
    create_event_role: bool = False
    create_remote_event: bool = False


@dataclass(frozen=True)
class EventUpdate:
    """Partial event update; None means unchanged."""

    title: str | None = None
    description: str | None = None
    difficulty_level: str | None = None
    scheduled_at: datetime | None = None
    duration_minutes: int | None = None
    capacity: int | None = None
    prerequisite_roles: tuple[str, ...] | None = None
    remote_channel_id: str | None = None
    status: EventStatus | None = None

    def changed_fields(self) -> dict[str, Any]:
        values = {k: v for k, v in self.__dict__.items() if v is not None}
        if "prerequisite_roles" in values:
            values["prerequisite_roles"] = list(values["prerequisite_roles"])
        return values


@dataclass(frozen=True)
class EventListFilter:
    status: EventStatus | None = None
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class EventList:
    items: list[EventResult]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class EventMutationResult:
    event: EventResult
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VoiceAccessResult:
    """One event voice access row."""

    id: str
    event_id: str
    user_id: str
    remote_user_id: str
    status: VoiceAccessStatus
    granted_at: datetime
    granted_by: str | None
    revoked_at: datetime | None
    revoke_reason: str | None

    @property
    def is_active(self) -> bool:
        return self.status == VoiceAccessStatus.ACTIVE


@dataclass(frozen=True)
class MissingTag:
    """Unmet prerequisite, shaped for client rendering."""

    id: str | None
    name: str
    display_name: str
    color: str | None
    icon: str | None


@dataclass(frozen=True)
class EligibilityResult:
    is_eligible: bool
    has_all_required_tags: bool
    missing_tags: list[MissingTag]
    user_tags: list[str]


@dataclass(frozen=True)
class EventAccessGrant:
    has_access: bool
    voice_channel_id: str | None
    event_title: str
    already_had_access: bool = False
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class EventAccessRevoke:
    """has_access is always False afterwards; revoked tells whether anything changed."""

    has_access: bool
    revoked: bool
    disconnected: bool = False
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CleanupResult:
    users_revoked: int
    discord_role_deleted: bool
    errors: int
    event_status: EventStatus


@dataclass(frozen=True)
class AccessStatus:
    has_access: bool
    access_details: VoiceAccessResult | None
    eligibility: EligibilityResult
