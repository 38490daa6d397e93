"""TagService tests: name rules, display changes resync holders, archive guard."""

import pytest

from guildsync.application.dtos.remote import RemoteMember
from guildsync.application.dtos.tag import TagCreate, TagListFilter, TagUpdate
from guildsync.application.services import TagService
from guildsync.application.use_cases.tags import TagReconciliationEngine
from guildsync.domain.enums import TagCategory


@pytest.fixture
def service(uow_factory, adapter) -> TagService:
    engine = TagReconciliationEngine(uow_factory, adapter)
    return TagService(uow_factory, adapter, engine, batch_size=2)


async def test_create_tag(service, store) -> None:
    result = await service.create_tag(
        TagCreate(name="python", display_name="Python", category=TagCategory.SKILL)
    )
    assert result.success
    assert result.data.name == "python"
    assert result.data.remote_role_id is None
    assert store.actions() == ["TAG_CREATED"]


@pytest.mark.parametrize("name", ["Python", "data-science", "c++", ""])
async def test_create_tag_rejects_bad_names(service, name) -> None:
    result = await service.create_tag(TagCreate(name=name, display_name="X"))
    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.details == {"field": "name"}


async def test_create_duplicate_tag(service, store) -> None:
    store.add_tag("python")
    result = await service.create_tag(TagCreate(name="python", display_name="Python"))
    assert result.error.code == "TAG_ALREADY_EXISTS"


async def test_display_change_updates_role_and_resyncs_holders(service, store, adapter) -> None:
    store.add_tag("python", "d-python", display_name="Python")
    for n in (1, 2, 3):
        store.add_user(f"user-{n}", f"discord-{n}")
        store.grant_tag(f"user-{n}", "tag-python")
    adapter.get_member.return_value = RemoteMember(id="x", role_ids=frozenset({"d-python"}))

    result = await service.update_tag("tag-python", TagUpdate(display_name="Python 3"))

    assert result.success
    assert result.data.tag.display_name == "Python 3"
    assert result.data.sync_warnings == []
    adapter.update_role.assert_awaited_once_with(
        "d-python", {"name": "Python 3", "color": "#3776AB"}
    )
    assert adapter.get_member.await_count == 3
    assert adapter.add_member_to_role.await_count == 3


async def test_non_display_change_does_not_touch_guild(service, store, adapter) -> None:
    store.add_tag("python", "d-python")
    store.add_user("user-1")
    store.grant_tag("user-1", "tag-python")

    await service.update_tag("tag-python", TagUpdate(description="The language"))

    adapter.update_role.assert_not_awaited()
    adapter.get_member.assert_not_awaited()


async def test_resync_reports_absent_members(service, store, adapter) -> None:
    store.add_tag("python", "d-python")
    store.add_user("user-1")
    store.grant_tag("user-1", "tag-python")
    adapter.get_member.return_value = None

    result = await service.update_tag("tag-python", TagUpdate(color="#000000"))

    assert len(result.data.sync_warnings) == 1
    assert result.data.sync_warnings[0].startswith("Tag resync for user user-1:")


async def test_archive_tag_in_use(service, store) -> None:
    store.add_tag("python")
    store.grant_tag("user-1", "tag-python")

    result = await service.archive_tag("tag-python")

    assert result.error.code == "TAG_IN_USE"


async def test_archive_tag_deletes_guild_role(service, store, adapter) -> None:
    store.add_tag("python", "d-python")

    result = await service.archive_tag("tag-python", actor_id="admin-1")

    assert result.data.tag.is_archived
    adapter.delete_role.assert_awaited_once_with("d-python")
    assert store.actions() == ["TAG_DELETED"]


async def test_list_tags_filters_assignable(service, store) -> None:
    store.add_tag("python")
    store.add_tag("winner", is_assignable=False, category=TagCategory.CONTEST)

    result = await service.list_tags(TagListFilter(assignable_only=True))

    assert [t.name for t in result.data.items] == ["python"]
