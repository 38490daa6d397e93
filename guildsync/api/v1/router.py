"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes get
their services from guildsync.api.v1.dependencies.
"""

from fastapi import APIRouter

from guildsync.api.v1.endpoints import (
    event_access,
    events,
    health,
    roles,
    tags,
    user_roles,
    user_tags,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(user_roles.router, prefix="/users", tags=["user-roles"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(user_tags.router, prefix="/users", tags=["user-tags"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(event_access.router, prefix="/events", tags=["event-access"])
