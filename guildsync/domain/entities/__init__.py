"""Domain entities (pure business rules, no persistence)."""

from guildsync.domain.entities.event import (
    ALLOWED_STATUS_TRANSITIONS,
    EventEntity,
    allowed_transitions,
    validate_status_transition,
)
from guildsync.domain.entities.grant import (
    GrantState,
    GrantTransition,
    grant_transition,
    revoke_transition,
)

__all__ = [
    "ALLOWED_STATUS_TRANSITIONS",
    "EventEntity",
    "GrantState",
    "GrantTransition",
    "allowed_transitions",
    "grant_transition",
    "revoke_transition",
    "validate_status_transition",
]
