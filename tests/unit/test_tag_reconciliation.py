"""TagReconciliationEngine tests: assignment, primary tag, wholesale guild sync."""

import pytest

from guildsync.application.dtos.remote import RemoteMember
from guildsync.application.use_cases.tags import TagReconciliationEngine
from guildsync.domain.exceptions import RemoteSyncError


@pytest.fixture
def engine(uow_factory, adapter) -> TagReconciliationEngine:
    return TagReconciliationEngine(uow_factory, adapter)


@pytest.fixture
def seeded(store):
    store.add_user("user-1", "discord-1")
    store.add_tag("python", "d-python")
    store.add_tag("rust", "d-rust")
    return store


async def test_assign_tag_pushes_role(engine, seeded, adapter) -> None:
    result = await engine.assign_tag_to_user("user-1", "python", granted_by="admin-1")

    assert result.success
    assert result.data.skipped is False
    assert result.data.user_tag.tag.name == "python"
    assert result.data.user_tag.is_active
    adapter.add_member_to_role.assert_awaited_once_with("discord-1", "d-python")
    assert seeded.actions() == ["TAG_ASSIGNED"]


async def test_assign_held_tag_is_skipped(engine, seeded, adapter) -> None:
    seeded.grant_tag("user-1", "tag-python")

    result = await engine.assign_tag_to_user("user-1", "python")

    assert result.success
    assert result.data.skipped is True
    adapter.add_member_to_role.assert_not_awaited()
    assert seeded.activity == []


async def test_assign_creates_missing_guild_role(engine, store, adapter) -> None:
    """A tag without a guild role gets one named after its display name."""
    store.add_user("user-1", "discord-1")
    store.add_tag("data_science", display_name="Data Science", color="#FF0000")

    result = await engine.assign_tag_to_user("user-1", "data_science")

    assert result.data.sync_warnings == []
    adapter.ensure_role_exists.assert_awaited_once_with("Data Science", 0xFF0000)
    adapter.add_member_to_role.assert_awaited_once_with("discord-1", "remote-created")
    assert store.tags["tag-data_science"].remote_role_id == "remote-created"


@pytest.mark.parametrize("flags", [{"is_active": False}, {"is_assignable": False}])
async def test_assign_unassignable_tag(engine, store, flags) -> None:
    store.add_user("user-1")
    store.add_tag("top_contributor", **flags)

    result = await engine.assign_tag_to_user("user-1", "top_contributor")

    assert result.error.code == "TAG_NOT_ASSIGNABLE"
    assert store.tag_grants == {}


async def test_assign_unknown_tag(engine, seeded) -> None:
    result = await engine.assign_tag_to_user("user-1", "cobol")
    assert result.error.code == "RESOURCE_NOT_FOUND"
    assert result.error.details["resource_id"] == "cobol"


async def test_remote_failure_is_warning(engine, seeded, adapter) -> None:
    adapter.add_member_to_role.side_effect = RemoteSyncError("Discord request timed out")

    result = await engine.assign_tag_to_user("user-1", "python")

    assert result.success
    assert result.data.sync_warnings == [
        "Failed to add Discord role for tag python: Discord request timed out"
    ]
    assert seeded.tag_grants[("user-1", "tag-python")].state.is_active
    assert "DISCORD_TAG_SYNC_FAILED" in seeded.actions()


class TestPrimaryTag:
    """At most one active grant per user is primary."""

    async def test_assign_as_primary_clears_previous(self, engine, seeded) -> None:
        seeded.grant_tag("user-1", "tag-rust", is_primary=True)

        result = await engine.assign_tag_to_user("user-1", "python", is_primary=True)

        assert result.data.user_tag.is_primary
        assert seeded.tag_grants[("user-1", "tag-python")].is_primary
        assert not seeded.tag_grants[("user-1", "tag-rust")].is_primary
        assert "TAG_PRIMARY_SET" in seeded.actions()

    async def test_assign_held_tag_as_primary_sets_flag(self, engine, seeded, adapter) -> None:
        seeded.grant_tag("user-1", "tag-python")
        seeded.grant_tag("user-1", "tag-rust", is_primary=True)

        result = await engine.assign_tag_to_user("user-1", "python", is_primary=True)

        assert result.data.skipped is True
        assert result.data.user_tag.is_primary
        assert seeded.tag_grants[("user-1", "tag-python")].is_primary
        assert not seeded.tag_grants[("user-1", "tag-rust")].is_primary
        assert seeded.actions() == ["TAG_PRIMARY_SET"]
        adapter.add_member_to_role.assert_not_awaited()

    async def test_set_primary_tag(self, engine, seeded) -> None:
        seeded.grant_tag("user-1", "tag-python", is_primary=True)
        seeded.grant_tag("user-1", "tag-rust")

        result = await engine.set_primary_tag("user-1", "rust", actor_id="user-1")

        assert result.success
        assert result.data.is_primary
        primaries = [k for k, row in seeded.tag_grants.items() if row.is_primary]
        assert primaries == [("user-1", "tag-rust")]

    async def test_set_primary_requires_active_grant(self, engine, seeded) -> None:
        result = await engine.set_primary_tag("user-1", "rust")
        assert result.error.code == "TAG_NOT_HELD"

    async def test_removing_primary_tag_clears_flag(self, engine, seeded, adapter) -> None:
        seeded.grant_tag("user-1", "tag-python", is_primary=True)

        result = await engine.remove_tag_from_user("user-1", "python")

        assert result.data.removed is True
        assert not seeded.tag_grants[("user-1", "tag-python")].is_primary
        adapter.remove_member_from_role.assert_awaited_once_with("discord-1", "d-python")


async def test_remove_unheld_tag_is_skipped(engine, seeded, adapter) -> None:
    result = await engine.remove_tag_from_user("user-1", "python")

    assert result.success
    assert result.data.skipped is True
    assert result.data.removed is False
    adapter.remove_member_from_role.assert_not_awaited()


class TestSyncUserTags:
    """sync_user_tags_with_discord removes every tag role, then re-adds active ones."""

    async def test_wholesale_replace(self, engine, seeded, adapter) -> None:
        seeded.grant_tag("user-1", "tag-python")
        adapter.get_member.return_value = RemoteMember(
            id="discord-1", role_ids=frozenset({"d-python", "d-rust", "d-unrelated"})
        )

        result = await engine.sync_user_tags_with_discord("user-1")

        assert result.success
        assert sorted(result.data.removed) == ["python", "rust"]
        assert result.data.added == ["python"]
        assert adapter.remove_member_from_role.await_count == 2
        adapter.add_member_to_role.assert_awaited_once_with("discord-1", "d-python")
        assert seeded.actions() == ["DISCORD_TAG_SYNC_SUCCESS"]

    async def test_member_absent(self, engine, seeded, adapter) -> None:
        adapter.get_member.return_value = None

        result = await engine.sync_user_tags_with_discord("user-1")

        assert result.error.code == "REMOTE_ACTOR_NOT_PRESENT"
        assert result.data.actor_present is False

    async def test_errors_are_collected(self, engine, seeded, adapter) -> None:
        seeded.grant_tag("user-1", "tag-rust")
        adapter.add_member_to_role.side_effect = RemoteSyncError("Discord API error 500", 500)

        result = await engine.sync_user_tags_with_discord("user-1")

        assert result.success
        assert result.data.added == []
        assert result.data.errors == ["add rust: Discord API error 500"]
        assert seeded.actions() == ["DISCORD_TAG_SYNC_FAILED"]


async def test_bulk_assign_tag(engine, seeded) -> None:
    seeded.add_user("user-2", "discord-2")
    seeded.grant_tag("user-2", "tag-python")

    result = await engine.bulk_assign_tag(["user-1", "user-2", "ghost", "user-1"], "python")

    assert result.data.success == 2
    assert result.data.failed == 1
    by_user = {item.user_id: item.result for item in result.data.results}
    assert by_user["user-1"].skipped is False
    assert by_user["user-2"].skipped is True
    assert result.data.errors[0].code == "USER_NOT_FOUND"
