"""Domain enumerations (event, access and tag vocabularies)."""

from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle status. Transitions are validated by EventEntity."""

    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        """Return all status values as strings."""
        return [status.value for status in cls]


class EventType(str, Enum):
    """Kind of voice channel an event runs in."""

    VOICE = "voice"
    STAGE = "stage"


class VoiceAccessStatus(str, Enum):
    """State of a user's voice access grant for one event."""

    ACTIVE = "active"
    REVOKED = "revoked"


class ParticipantStatus(str, Enum):
    """Participation record status for an event."""

    REGISTERED = "registered"
    GRANTED = "granted"
    ATTENDED = "attended"
    REVOKED = "revoked"


class TagCategory(str, Enum):
    """Tag grouping used for display and filtering."""

    SKILL = "skill"
    ACHIEVEMENT = "achievement"
    SPECIAL = "special"
    CONTEST = "contest"
    COMMUNITY = "community"

    @classmethod
    def values(cls) -> list[str]:
        """Return all category values as strings."""
        return [category.value for category in cls]


class GrantAction(str, Enum):
    """Outcome of applying a grant transition to an existing ledger row."""

    INSERT = "insert"
    REACTIVATE = "reactivate"
    SKIP = "skip"
