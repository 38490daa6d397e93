"""Ports: repository and external service Protocols."""

from guildsync.application.interfaces.repositories import (
    IActivityLog,
    IEventAccessRepository,
    IEventRepository,
    IRoleRepository,
    ITagRepository,
    IUnitOfWork,
    IUserRepository,
    IUserRoleRepository,
    IUserTagRepository,
)
from guildsync.application.interfaces.services import IRemoteGuildAdapter

__all__ = [
    "IActivityLog",
    "IEventAccessRepository",
    "IEventRepository",
    "IRemoteGuildAdapter",
    "IRoleRepository",
    "ITagRepository",
    "IUnitOfWork",
    "IUserRepository",
    "IUserRoleRepository",
    "IUserTagRepository",
]
