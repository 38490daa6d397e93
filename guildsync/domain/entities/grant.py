"""Grant ledger state and its pure transitions.

A (user, role) or (user, tag) pair has at most one ledger row for all time.
Granting never inserts a second row: a revoked row is reactivated in place.
These functions decide what happens to a row without touching storage so the
rules can be tested on their own.
"""

from dataclasses import dataclass, replace
from datetime import datetime

from guildsync.domain.enums import GrantAction


@dataclass(frozen=True)
class GrantState:
    """Grant/revoke fields of one ledger row."""

    granted_at: datetime
    granted_by: str | None
    grant_reason: str
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    revoke_reason: str | None = None
    is_system_granted: bool = True

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None


@dataclass(frozen=True)
class GrantTransition:
    """Result of grant_transition: what to do and the row state afterwards."""

    action: GrantAction
    state: GrantState


def grant_transition(
    existing: GrantState | None,
    *,
    granted_by: str | None,
    reason: str,
    now: datetime,
) -> GrantTransition:
    """Decide how to grant given the current ledger row (or None).

    - No row: INSERT a fresh active state.
    - Revoked row: REACTIVATE; revoke fields cleared, grant fields reset.
    - Active row: SKIP; state returned unchanged.
    """
    if existing is not None and existing.is_active:
        return GrantTransition(GrantAction.SKIP, existing)
    state = GrantState(
        granted_at=now,
        granted_by=granted_by,
        grant_reason=reason,
        revoked_at=None,
        revoked_by=None,
        revoke_reason=None,
        is_system_granted=not granted_by,
    )
    action = GrantAction.INSERT if existing is None else GrantAction.REACTIVATE
    return GrantTransition(action, state)


def revoke_transition(
    existing: GrantState | None,
    *,
    revoked_by: str | None,
    reason: str,
    now: datetime,
) -> GrantState | None:
    """Return the revoked state, or None when there is no active grant to revoke."""
    if existing is None or not existing.is_active:
        return None
    return replace(existing, revoked_at=now, revoked_by=revoked_by, revoke_reason=reason)
