"""Tests for domain entities (grant transitions, EventEntity, status machine) and enums."""

from datetime import UTC, datetime, timedelta

import pytest

from guildsync.domain.entities.event import (
    ALLOWED_STATUS_TRANSITIONS,
    EventEntity,
    allowed_transitions,
    validate_status_transition,
)
from guildsync.domain.entities.grant import GrantState, grant_transition, revoke_transition
from guildsync.domain.enums import EventStatus, GrantAction, TagCategory
from guildsync.domain.exceptions import InvalidStatusTransitionException, ValidationException

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)
T1 = T0 + timedelta(days=1)


class TestEnums:
    """values() helpers on str enums."""

    def test_event_status_values(self) -> None:
        assert EventStatus.values() == ["scheduled", "active", "completed", "cancelled"]

    def test_tag_category_values(self) -> None:
        got = TagCategory.values()
        assert "skill" in got
        assert "contest" in got
        assert len(got) == 5


class TestGrantTransition:
    """grant_transition decides insert, reactivate or skip for one ledger row."""

    def test_no_row_inserts_active_state(self) -> None:
        t = grant_transition(None, granted_by="admin-1", reason="promotion", now=T0)
        assert t.action == GrantAction.INSERT
        assert t.state.is_active
        assert t.state.granted_at == T0
        assert t.state.granted_by == "admin-1"
        assert t.state.is_system_granted is False

    def test_system_grant_when_no_granter(self) -> None:
        t = grant_transition(None, granted_by=None, reason="auto", now=T0)
        assert t.state.is_system_granted is True

    def test_active_row_is_skipped_unchanged(self) -> None:
        existing = GrantState(granted_at=T0, granted_by=None, grant_reason="seed")
        t = grant_transition(existing, granted_by="admin-1", reason="again", now=T1)
        assert t.action == GrantAction.SKIP
        assert t.state is existing

    def test_revoked_row_is_reactivated_in_place(self) -> None:
        """Reactivation clears the revoke fields and resets the grant fields."""
        revoked = GrantState(
            granted_at=T0,
            granted_by=None,
            grant_reason="seed",
            revoked_at=T0 + timedelta(hours=1),
            revoked_by="admin-1",
            revoke_reason="demoted",
        )
        t = grant_transition(revoked, granted_by="admin-2", reason="promoted again", now=T1)
        assert t.action == GrantAction.REACTIVATE
        assert t.state.is_active
        assert t.state.revoked_by is None
        assert t.state.revoke_reason is None
        assert t.state.granted_at == T1
        assert t.state.grant_reason == "promoted again"


class TestRevokeTransition:
    def test_revokes_active_grant(self) -> None:
        existing = GrantState(granted_at=T0, granted_by=None, grant_reason="seed")
        state = revoke_transition(existing, revoked_by="admin-1", reason="left", now=T1)
        assert state is not None
        assert not state.is_active
        assert state.revoked_at == T1
        assert state.revoke_reason == "left"
        assert state.granted_at == T0

    def test_missing_or_already_revoked_returns_none(self) -> None:
        revoked = GrantState(granted_at=T0, granted_by=None, grant_reason="seed", revoked_at=T0)
        assert revoke_transition(None, revoked_by=None, reason="x", now=T1) is None
        assert revoke_transition(revoked, revoked_by=None, reason="x", now=T1) is None


class TestStatusMachine:
    """validate_status_transition against the transition table."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (EventStatus.SCHEDULED, EventStatus.ACTIVE),
            (EventStatus.SCHEDULED, EventStatus.CANCELLED),
            (EventStatus.ACTIVE, EventStatus.COMPLETED),
            (EventStatus.ACTIVE, EventStatus.CANCELLED),
            (EventStatus.CANCELLED, EventStatus.SCHEDULED),
        ],
    )
    def test_allowed_transitions_pass(self, current: EventStatus, target: EventStatus) -> None:
        validate_status_transition(current, target)

    def test_completed_is_terminal(self) -> None:
        assert ALLOWED_STATUS_TRANSITIONS[EventStatus.COMPLETED] == ()
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            validate_status_transition(EventStatus.COMPLETED, EventStatus.ACTIVE)
        assert exc_info.value.details["allowed"] == []
        assert "none" in exc_info.value.message

    def test_same_state_is_rejected(self) -> None:
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            validate_status_transition(EventStatus.ACTIVE, EventStatus.ACTIVE)
        assert exc_info.value.error_code == "INVALID_STATUS_TRANSITION"
        assert exc_info.value.details["allowed"] == ["completed", "cancelled"]

    def test_scheduled_cannot_complete(self) -> None:
        with pytest.raises(InvalidStatusTransitionException):
            validate_status_transition(EventStatus.SCHEDULED, EventStatus.COMPLETED)

    def test_allowed_transitions_as_strings(self) -> None:
        assert allowed_transitions(EventStatus.CANCELLED) == ["scheduled"]


def _entity(**overrides) -> EventEntity:
    fields = {
        "id": "ev1",
        "title": "Python Study Group",
        "status": EventStatus.SCHEDULED,
        "scheduled_at": T0,
    }
    fields.update(overrides)
    return EventEntity(**fields)


class TestEventEntity:
    """EventEntity validation and access window arithmetic."""

    def test_blank_title_raises(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            _entity(title="   ")
        assert exc_info.value.details == {"field": "title"}

    def test_capacity_below_one_raises(self) -> None:
        with pytest.raises(ValidationException):
            _entity(capacity=0)

    def test_duration_below_one_raises(self) -> None:
        with pytest.raises(ValidationException):
            _entity(duration_minutes=0)

    def test_access_opens_before_start_by_grace(self) -> None:
        assert _entity().access_opens_at(30) == T0 - timedelta(minutes=30)

    def test_ends_at_uses_duration_or_default(self) -> None:
        assert _entity(duration_minutes=90).ends_at(60) == T0 + timedelta(minutes=90)
        assert _entity().ends_at(60) == T0 + timedelta(minutes=60)

    def test_is_full(self) -> None:
        assert not _entity().is_full(1000)
        assert _entity(capacity=2).is_full(2)
        assert not _entity(capacity=2).is_full(1)

    def test_transition_to_updates_status(self) -> None:
        entity = _entity()
        entity.transition_to(EventStatus.ACTIVE)
        assert entity.status == EventStatus.ACTIVE
        assert entity.can_transition_to(EventStatus.COMPLETED)
        assert not entity.can_transition_to(EventStatus.SCHEDULED)
