"""Request-scoped actor context (contextvars).

Set by the auth dependency after the bearer token is verified; read by the
activity-log sink so rows carry who acted without threading the id through
every call.

Usage:
    set_current_actor("user123", ActorType.ADMIN)
    actor_id = get_current_actor_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from guildsync.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor."""

    actor_id: str | None
    actor_type: ActorType


def set_current_actor(
    actor_id: str | None, actor_type: ActorType = ActorType.USER
) -> None:
    """Set the actor for the current task.

    Raises:
        ValueError: If actor_type is not SYSTEM and actor_id is empty.
    """
    if actor_type != ActorType.SYSTEM and not actor_id:
        raise ValueError("actor_id is required for USER and ADMIN actors")
    _current_actor_id.set(actor_id)
    _current_actor_type.set(actor_type)


def clear_current_actor() -> None:
    """Reset to the SYSTEM actor."""
    _current_actor_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)


def get_current_actor_id() -> str | None:
    return _current_actor_id.get()


def get_current_actor_type() -> ActorType:
    return _current_actor_type.get()


def get_actor_context() -> ActorContext:
    """Return a snapshot of the current actor."""
    return ActorContext(
        actor_id=_current_actor_id.get(),
        actor_type=_current_actor_type.get(),
    )
