"""Event domain entity and status state machine."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from guildsync.domain.enums import EventStatus
from guildsync.domain.exceptions import InvalidStatusTransitionException, ValidationException

# completed is terminal; cancelled may be rescheduled.
ALLOWED_STATUS_TRANSITIONS: dict[EventStatus, tuple[EventStatus, ...]] = {
    EventStatus.SCHEDULED: (EventStatus.ACTIVE, EventStatus.CANCELLED),
    EventStatus.ACTIVE: (EventStatus.COMPLETED, EventStatus.CANCELLED),
    EventStatus.COMPLETED: (),
    EventStatus.CANCELLED: (EventStatus.SCHEDULED,),
}


def allowed_transitions(current: EventStatus) -> list[str]:
    """Return the statuses reachable from current, as strings."""
    return [s.value for s in ALLOWED_STATUS_TRANSITIONS[current]]


def validate_status_transition(current: EventStatus, target: EventStatus) -> None:
    """Raise InvalidStatusTransitionException unless current -> target is legal.

    A same-state "transition" is rejected like any other illegal pair.
    """
    if target not in ALLOWED_STATUS_TRANSITIONS[current]:
        raise InvalidStatusTransitionException(
            current.value, target.value, allowed_transitions(current)
        )


@dataclass
class EventEntity:
    """Event lifecycle and access-window rules, independent of persistence."""

    id: str
    title: str
    status: EventStatus
    scheduled_at: datetime
    duration_minutes: int | None = None
    capacity: int | None = None
    prerequisite_roles: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate event business rules. Raises ValidationException if invalid."""
        if not self.title or not self.title.strip():
            raise ValidationException("Event title is required", field="title")
        if self.capacity is not None and self.capacity < 1:
            raise ValidationException("Capacity must be at least 1", field="capacity")
        if self.duration_minutes is not None and self.duration_minutes < 1:
            raise ValidationException(
                "Duration must be at least 1 minute", field="duration_minutes"
            )

    def transition_to(self, target: EventStatus) -> None:
        """Move to target status or raise InvalidStatusTransitionException."""
        validate_status_transition(self.status, target)
        self.status = target

    def can_transition_to(self, target: EventStatus) -> bool:
        return target in ALLOWED_STATUS_TRANSITIONS[self.status]

    def access_opens_at(self, grace_minutes: int) -> datetime:
        """Earliest time voice access may be granted."""
        return self.scheduled_at - timedelta(minutes=grace_minutes)

    def ends_at(self, default_minutes: int) -> datetime:
        """Scheduled end: start + duration (or default_minutes when unset)."""
        return self.scheduled_at + timedelta(
            minutes=self.duration_minutes or default_minutes
        )

    def is_full(self, active_count: int) -> bool:
        return self.capacity is not None and active_count >= self.capacity
