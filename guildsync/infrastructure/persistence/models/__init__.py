"""Persistence models: ORM entities and mixins."""

from guildsync.infrastructure.persistence.models.activity_log import ActivityLog
from guildsync.infrastructure.persistence.models.event import Event
from guildsync.infrastructure.persistence.models.event_access import (
    EventParticipant,
    EventVoiceAccess,
)
from guildsync.infrastructure.persistence.models.grants import UserRoleGrant, UserTagGrant
from guildsync.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin
from guildsync.infrastructure.persistence.models.role import Role
from guildsync.infrastructure.persistence.models.tag import Tag
from guildsync.infrastructure.persistence.models.user import User

__all__ = [
    "ActivityLog",
    "CuidMixin",
    "Event",
    "EventParticipant",
    "EventVoiceAccess",
    "Role",
    "Tag",
    "TimestampMixin",
    "User",
    "UserRoleGrant",
    "UserTagGrant",
]
