"""DTOs exchanged with the remote guild adapter."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RemoteMember:
    """Guild member as seen by the adapter."""

    id: str
    role_ids: frozenset[str] = frozenset()
    voice_channel_id: str | None = None


@dataclass(frozen=True)
class ScheduledEventSpec:
    """Fields for creating or updating a remote scheduled event.

    None fields are left unchanged on update.
    """

    name: str | None = None
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    channel_id: str | None = None
    is_stage: bool = False
    status: str | None = None
