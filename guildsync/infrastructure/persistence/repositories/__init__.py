"""Persistence repositories. Re-exports for the unit of work."""

from guildsync.infrastructure.persistence.repositories.base import BaseRepository
from guildsync.infrastructure.persistence.repositories.event_access_repo import (
    EventAccessRepository,
)
from guildsync.infrastructure.persistence.repositories.event_repo import EventRepository
from guildsync.infrastructure.persistence.repositories.role_repo import RoleRepository
from guildsync.infrastructure.persistence.repositories.tag_repo import TagRepository
from guildsync.infrastructure.persistence.repositories.user_repo import UserRepository
from guildsync.infrastructure.persistence.repositories.user_role_repo import (
    UserRoleRepository,
)
from guildsync.infrastructure.persistence.repositories.user_tag_repo import (
    UserTagRepository,
)

__all__ = [
    "BaseRepository",
    "EventAccessRepository",
    "EventRepository",
    "RoleRepository",
    "TagRepository",
    "UserRepository",
    "UserRoleRepository",
    "UserTagRepository",
]
