"""EventAccessService tests: access checks, grant with compensation, revoke and cleanup."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from guildsync.application.dtos.remote import RemoteMember
from guildsync.application.use_cases.events import EventAccessService
from guildsync.core.constants import EVENT_ACCESS_ALLOW, EVENT_ACCESS_DENY
from guildsync.domain.enums import EventStatus, ParticipantStatus
from guildsync.domain.exceptions import DuplicateAssignmentException, RemoteSyncError

START = datetime(2025, 6, 1, 18, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock():
    """Mutable clock; defaults to five minutes after the event start."""
    now = {"value": START + timedelta(minutes=5)}
    return now


@pytest.fixture
def service(uow_factory, adapter, clock) -> EventAccessService:
    return EventAccessService(
        uow_factory, adapter, grace_minutes=30, clock=lambda: clock["value"]
    )


@pytest.fixture
def seeded(store):
    store.add_user("user-1", "discord-1")
    store.add_event("event-1", scheduled_at=START, status=EventStatus.ACTIVE)
    return store


class TestRequestAccessChecks:
    """Refusals happen before any remote call."""

    async def test_unknown_event(self, service, seeded) -> None:
        result = await service.request_event_access("nope", "user-1")
        assert result.error.code == "EVENT_NOT_FOUND"

    async def test_event_not_active(self, service, store, adapter) -> None:
        store.add_user("user-1")
        store.add_event("event-1", scheduled_at=START, status=EventStatus.SCHEDULED)

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "EVENT_NOT_ACTIVE"
        assert result.error.details == {"current_status": "scheduled"}
        adapter.create_channel_permission_overwrite.assert_not_awaited()

    async def test_too_early_reports_minutes(self, service, seeded, clock) -> None:
        """Access opens grace minutes before start; 45 minutes early leaves 15 to wait."""
        clock["value"] = START - timedelta(minutes=45)

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "EVENT_TOO_EARLY"
        assert result.error.details == {"minutes_until_access": 15}

    async def test_within_grace_window_is_allowed(self, service, seeded, clock) -> None:
        clock["value"] = START - timedelta(minutes=29)
        result = await service.request_event_access("event-1", "user-1")
        assert result.success

    async def test_already_has_access(self, service, seeded, adapter) -> None:
        seeded.grant_access("event-1", "user-1")

        result = await service.request_event_access("event-1", "user-1")

        assert result.success
        assert result.data.already_had_access is True
        adapter.create_channel_permission_overwrite.assert_not_awaited()

    async def test_unlinked_user(self, service, seeded) -> None:
        seeded.add_user("user-2", remote_user_id=None)
        result = await service.request_event_access("event-1", "user-2")
        assert result.error.code == "REMOTE_IDENTITY_MISSING"

    async def test_missing_required_tags(self, service, store) -> None:
        store.add_user("user-1")
        store.add_tag("python", display_name="Python", color="#3776AB", icon="🐍")
        store.add_tag("rust")
        store.grant_tag("user-1", "tag-rust")
        store.add_event("event-1", scheduled_at=START, prerequisite_roles=["python", "rust"])

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "MISSING_REQUIRED_TAGS"
        assert result.error.details["missing_tags"] == [
            {
                "id": "tag-python",
                "name": "python",
                "display_name": "Python",
                "color": "#3776AB",
                "icon": "🐍",
            }
        ]

    async def test_role_satisfies_prerequisite(self, service, store) -> None:
        store.add_user("user-1")
        store.add_role("MENTOR")
        store.grant_role("user-1", "role-mentor")
        store.add_event("event-1", scheduled_at=START, prerequisite_roles=["MENTOR"])

        result = await service.request_event_access("event-1", "user-1")

        assert result.success

    async def test_event_full(self, service, seeded, adapter) -> None:
        seeded.add_event("event-2", scheduled_at=START, capacity=1)
        seeded.grant_access("event-2", "someone-else", "discord-9")

        result = await service.request_event_access("event-2", "user-1")

        assert result.error.code == "EVENT_FULL"
        assert result.error.details == {"max_participants": 1, "current_count": 1}
        adapter.create_channel_permission_overwrite.assert_not_awaited()


class TestGrant:
    async def test_grant_writes_overwrite_then_local_rows(self, service, seeded, adapter) -> None:
        result = await service.request_event_access("event-1", "user-1")

        assert result.success
        assert result.data.has_access is True
        assert result.data.voice_channel_id == "channel-1"
        adapter.create_channel_permission_overwrite.assert_awaited_once_with(
            "channel-1",
            "discord-1",
            list(EVENT_ACCESS_ALLOW),
            list(EVENT_ACCESS_DENY),
            reason="Event access: Python Study Group",
        )
        assert seeded.access[("event-1", "user-1")].is_active
        assert seeded.participants[("event-1", "user-1")] == ParticipantStatus.GRANTED
        assert "EVENT_ACCESS_GRANTED" in seeded.actions()

    async def test_event_role_failure_is_only_a_warning(self, service, store, adapter) -> None:
        store.add_user("user-1")
        store.add_event("event-1", scheduled_at=START, event_role_id="evrole")
        adapter.add_member_to_role.side_effect = RemoteSyncError("Discord API error 403", 403)

        result = await service.request_event_access("event-1", "user-1")

        assert result.success
        assert result.data.sync_warnings == ["Failed to add event role: Discord API error 403"]

    async def test_overwrite_failure_writes_nothing(self, service, seeded, adapter) -> None:
        adapter.create_channel_permission_overwrite.side_effect = RemoteSyncError("down")

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "DISCORD_ACCESS_FAILED"
        assert seeded.access == {}

    async def test_no_channel_configured(self, service, store) -> None:
        store.add_user("user-1")
        store.add_event("event-1", scheduled_at=START, remote_channel_id=None)

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "DISCORD_ACCESS_FAILED"

    async def test_local_failure_compensates_remote_grant(self, service, store, adapter) -> None:
        """When the access row cannot be written the overwrite and event role are removed."""
        store.add_user("user-1", "discord-1")
        store.add_event("event-1", scheduled_at=START, event_role_id="evrole")
        store.event_access_repo.grant_access = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection lost"))
        )

        result = await service.request_event_access("event-1", "user-1")

        assert result.error.code == "DATABASE_ERROR"
        adapter.delete_channel_permission_overwrite.assert_awaited_once_with(
            "channel-1", "discord-1", reason="Event access rolled back"
        )
        adapter.remove_member_from_role.assert_awaited_once_with("discord-1", "evrole")
        compensated = [e for e in store.activity if e.action == "EVENT_ACCESS_COMPENSATED"]
        assert compensated[0].details["cause"] == "database_error"

    async def test_full_under_lock_compensates(self, service, seeded, adapter) -> None:
        """Capacity is re-checked under the event lock after the remote grant."""
        seeded.add_event("event-2", scheduled_at=START, capacity=1)
        counts = iter([0, 1])
        seeded.event_access_repo.count_active = AsyncMock(side_effect=lambda _: next(counts))

        result = await service.request_event_access("event-2", "user-1")

        assert result.error.code == "EVENT_FULL"
        adapter.delete_channel_permission_overwrite.assert_awaited_once()
        assert seeded.access == {}

    async def test_concurrent_duplicate_is_already_had_access(self, service, seeded, adapter) -> None:
        seeded.event_access_repo.grant_access = AsyncMock(
            side_effect=DuplicateAssignmentException("exists", "event_access")
        )

        result = await service.request_event_access("event-1", "user-1")

        assert result.success
        assert result.data.already_had_access is True
        adapter.delete_channel_permission_overwrite.assert_not_awaited()

    async def test_admin_grant_bypasses_checks(self, service, store, adapter) -> None:
        store.add_user("user-1")
        store.add_event(
            "event-1",
            scheduled_at=START + timedelta(days=3),
            status=EventStatus.SCHEDULED,
            capacity=1,
            prerequisite_roles=["python"],
        )
        store.grant_access("event-1", "someone-else", "discord-9")

        result = await service.admin_grant_access("event-1", "user-1", "admin-1")

        assert result.success
        assert store.access[("event-1", "user-1")].is_active
        granted = [e for e in store.activity if e.action == "EVENT_ACCESS_GRANTED"]
        assert granted[0].actor_id == "admin-1"


class TestRevoke:
    async def test_revoke_is_idempotent(self, service, seeded, adapter) -> None:
        seeded.grant_access("event-1", "user-1")

        first = await service.revoke_event_access("event-1", "user-1")
        second = await service.revoke_event_access("event-1", "user-1")

        assert first.data.revoked is True
        assert first.data.has_access is False
        assert second.success
        assert second.data.revoked is False
        assert adapter.delete_channel_permission_overwrite.await_count == 1
        assert seeded.participants[("event-1", "user-1")] == ParticipantStatus.REVOKED

    async def test_manual_revoke_does_not_disconnect(self, service, seeded, adapter) -> None:
        seeded.grant_access("event-1", "user-1")
        adapter.get_member.return_value = RemoteMember(id="discord-1", voice_channel_id="channel-1")

        result = await service.revoke_event_access("event-1", "user-1", reason="manual")

        assert result.data.disconnected is False
        adapter.disconnect_member_from_voice.assert_not_awaited()

    async def test_admin_revoke_disconnects_member_in_channel(self, service, seeded, adapter) -> None:
        seeded.grant_access("event-1", "user-1")
        adapter.get_member.return_value = RemoteMember(id="discord-1", voice_channel_id="channel-1")

        result = await service.revoke_event_access(
            "event-1", "user-1", reason="admin_revoked", revoked_by="admin-1"
        )

        assert result.data.disconnected is True
        adapter.disconnect_member_from_voice.assert_awaited_once_with(
            "discord-1", "Event access revoked: admin_revoked"
        )

    async def test_member_in_other_channel_is_not_disconnected(
        self, service, seeded, adapter
    ) -> None:
        seeded.grant_access("event-1", "user-1")
        adapter.get_member.return_value = RemoteMember(id="discord-1", voice_channel_id="lounge")

        result = await service.revoke_event_access("event-1", "user-1", reason="admin_revoked")

        assert result.data.disconnected is False

    async def test_remote_failures_do_not_block_local_revoke(self, service, seeded, adapter) -> None:
        seeded.grant_access("event-1", "user-1")
        adapter.delete_channel_permission_overwrite.side_effect = RemoteSyncError("down")

        result = await service.revoke_event_access("event-1", "user-1")

        assert result.data.revoked is True
        assert result.data.sync_warnings == ["Failed to remove channel access: down"]
        assert not seeded.access[("event-1", "user-1")].is_active


class TestCleanup:
    async def test_cleanup_revokes_all_and_completes(self, service, store, adapter) -> None:
        store.add_event("event-1", scheduled_at=START, event_role_id="evrole")
        store.grant_access("event-1", "user-1", "discord-1")
        store.grant_access("event-1", "user-2", "discord-2")

        result = await service.cleanup_event("event-1")

        assert result.success
        assert result.data.users_revoked == 2
        assert result.data.discord_role_deleted is True
        assert result.data.errors == 0
        assert result.data.event_status == EventStatus.COMPLETED
        adapter.delete_temporary_event_role.assert_awaited_once_with("evrole")
        assert store.events["event-1"].event_role_id is None
        assert store.events["event-1"].status == EventStatus.COMPLETED

    async def test_cleanup_keeps_cancelled_status(self, service, store) -> None:
        store.add_event("event-1", scheduled_at=START, status=EventStatus.CANCELLED)

        result = await service.cleanup_event("event-1")

        assert result.data.event_status == EventStatus.CANCELLED
        assert store.events["event-1"].status == EventStatus.CANCELLED

    async def test_role_delete_failure_counts_as_error(self, service, store, adapter) -> None:
        store.add_event("event-1", scheduled_at=START, event_role_id="evrole")
        adapter.delete_temporary_event_role.side_effect = RemoteSyncError("down")

        result = await service.cleanup_event("event-1")

        assert result.data.discord_role_deleted is False
        assert result.data.errors == 1
        assert store.events["event-1"].event_role_id == "evrole"


class TestQueries:
    async def test_eligibility_lists_missing_and_held(self, service, store) -> None:
        store.add_user("user-1")
        store.add_tag("rust")
        store.grant_tag("user-1", "tag-rust")
        store.add_role("MENTOR", color="#FFD700")
        store.add_event("event-1", scheduled_at=START, prerequisite_roles=["MENTOR", "ghost"])

        result = await service.check_event_eligibility("event-1", "user-1")

        assert result.data.is_eligible is False
        assert result.data.user_tags == ["rust"]
        names = [(m.name, m.id, m.color) for m in result.data.missing_tags]
        assert names == [("MENTOR", "role-mentor", "#FFD700"), ("ghost", None, None)]

    async def test_access_status(self, service, seeded) -> None:
        seeded.grant_access("event-1", "user-1")

        result = await service.get_user_access_status("event-1", "user-1")

        assert result.data.has_access is True
        assert result.data.access_details.remote_user_id == "discord-1"
        assert result.data.eligibility.is_eligible is True
