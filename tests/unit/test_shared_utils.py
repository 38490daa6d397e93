"""Tests for shared helpers: colors, UTC datetimes, actor context, id generation."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from guildsync.shared.context import (
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    set_current_actor,
)
from guildsync.shared.enums import ActorType
from guildsync.shared.utils.colors import hex_to_int
from guildsync.shared.utils.datetime import ensure_utc, minutes_until
from guildsync.shared.utils.generators import generate_cuid


def test_hex_to_int() -> None:
    assert hex_to_int("#FFD700") == 0xFFD700
    assert hex_to_int("#00ae86") == 0x00AE86
    assert hex_to_int(42) == 42
    assert hex_to_int(None) is None
    assert hex_to_int("FFD700") is None


def test_ensure_utc_handles_naive_and_offset() -> None:
    naive = datetime(2025, 1, 1, 12, 0, 0)
    assert ensure_utc(naive) == datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)
    plus_two = datetime(2025, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(plus_two).hour == 12
    assert ensure_utc(None) is None


def test_minutes_until_rounds_up() -> None:
    now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)
    assert minutes_until(now + timedelta(seconds=61), now) == 2
    assert minutes_until(now + timedelta(minutes=15), now) == 15
    assert minutes_until(now - timedelta(minutes=1), now) == 0


def test_actor_context_roundtrip() -> None:
    set_current_actor("admin-1", ActorType.ADMIN)
    ctx = get_actor_context()
    assert ctx.actor_id == "admin-1"
    assert ctx.actor_type == ActorType.ADMIN
    clear_current_actor()
    assert get_current_actor_id() is None
    assert get_actor_context().actor_type == ActorType.SYSTEM


def test_user_actor_requires_id() -> None:
    with pytest.raises(ValueError):
        set_current_actor(None, ActorType.USER)


def test_generate_cuid_is_unique() -> None:
    ids = {generate_cuid() for _ in range(50)}
    assert len(ids) == 50
    assert all(isinstance(i, str) and i for i in ids)
