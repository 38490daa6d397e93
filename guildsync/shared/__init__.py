"""Shared helpers: actor context, enums, logging, utilities. No business logic."""

from guildsync.shared.context import (
    ActorContext,
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    get_current_actor_type,
    set_current_actor,
)
from guildsync.shared.enums import ActivityAction, ActorType, EntityType
from guildsync.shared.utils import ensure_utc, generate_cuid, minutes_until, utc_now

__all__ = [
    "ActivityAction",
    "ActorContext",
    "ActorType",
    "EntityType",
    "clear_current_actor",
    "ensure_utc",
    "generate_cuid",
    "get_actor_context",
    "get_current_actor_id",
    "get_current_actor_type",
    "minutes_until",
    "set_current_actor",
    "utc_now",
]
