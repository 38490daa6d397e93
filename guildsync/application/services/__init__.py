"""Application services: role and tag stores."""

from guildsync.application.services.role_service import RoleService
from guildsync.application.services.tag_service import TagService

__all__ = ["RoleService", "TagService"]
