"""API v1 dependencies: auth, DB and service providers."""

from guildsync.api.v1.dependencies._composition import (
    get_event_access_service,
    get_event_service,
    get_remote_adapter,
    get_role_engine,
    get_role_service,
    get_tag_engine,
    get_tag_service,
)
from guildsync.api.v1.dependencies.auth import (
    CurrentActor,
    get_current_actor,
    require_admin,
    require_self_or_admin,
)
from guildsync.api.v1.dependencies.db import get_db, get_uow_factory

__all__ = [
    "CurrentActor",
    "get_current_actor",
    "get_db",
    "get_event_access_service",
    "get_event_service",
    "get_remote_adapter",
    "get_role_engine",
    "get_role_service",
    "get_tag_engine",
    "get_tag_service",
    "get_uow_factory",
    "require_admin",
    "require_self_or_admin",
]
