"""Cross-cutting enumerations (actor and activity-log vocabularies).

Domain state enums (event status, access status, tag category) live in
guildsync.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Adds values() to str enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all member values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who performed an action recorded in the activity log."""

    USER = "USER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class EntityType(_ValuesMixin, str, Enum):
    """Entity kinds referenced by activity-log rows."""

    USER = "USER"
    ROLE = "ROLE"
    TAG = "TAG"
    EVENT = "EVENT"


class ActivityAction(_ValuesMixin, str, Enum):
    """Activity-log action types."""

    ROLE_CREATED = "ROLE_CREATED"
    ROLE_UPDATED = "ROLE_UPDATED"
    ROLE_DELETED = "ROLE_DELETED"
    ROLE_ASSIGNED = "ROLE_ASSIGNED"
    ROLE_REASSIGNED = "ROLE_REASSIGNED"
    ROLE_REVOKED = "ROLE_REVOKED"
    ROLE_ASSIGNMENT_FAILED = "ROLE_ASSIGNMENT_FAILED"
    ROLE_REMOVAL_FAILED = "ROLE_REMOVAL_FAILED"
    DISCORD_ROLE_SYNC_SUCCESS = "DISCORD_ROLE_SYNC_SUCCESS"
    DISCORD_ROLE_SYNC_FAILED = "DISCORD_ROLE_SYNC_FAILED"
    TAG_CREATED = "TAG_CREATED"
    TAG_UPDATED = "TAG_UPDATED"
    TAG_DELETED = "TAG_DELETED"
    TAG_ASSIGNED = "TAG_ASSIGNED"
    TAG_REMOVED = "TAG_REMOVED"
    TAG_PRIMARY_SET = "TAG_PRIMARY_SET"
    DISCORD_TAG_SYNC_SUCCESS = "DISCORD_TAG_SYNC_SUCCESS"
    DISCORD_TAG_SYNC_FAILED = "DISCORD_TAG_SYNC_FAILED"
    EVENT_CREATED = "EVENT_CREATED"
    EVENT_UPDATED = "EVENT_UPDATED"
    EVENT_STATUS_CHANGED = "EVENT_STATUS_CHANGED"
    EVENT_DELETED = "EVENT_DELETED"
    EVENT_ACCESS_GRANTED = "EVENT_ACCESS_GRANTED"
    EVENT_ACCESS_REVOKED = "EVENT_ACCESS_REVOKED"
    EVENT_ACCESS_COMPENSATED = "EVENT_ACCESS_COMPENSATED"
    EVENT_CLEANED_UP = "EVENT_CLEANED_UP"
