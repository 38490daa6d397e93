"""Tests for JWT verification and settings validation."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from guildsync.core.config import Settings
from guildsync.infrastructure.security.jwt import (
    create_access_token,
    is_admin_claims,
    verify_token,
)


def test_token_roundtrip() -> None:
    token = create_access_token({"sub": "user-1", "role": "admin"})
    payload = verify_token(token)
    assert payload["sub"] == "user-1"
    assert payload["role"] == "admin"
    assert "exp" in payload


def test_expired_token_rejected() -> None:
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(ValueError, match="Invalid token"):
        verify_token(token)


def test_token_without_subject_rejected() -> None:
    token = create_access_token({"role": "admin"})
    with pytest.raises(ValueError):
        verify_token(token)


def test_garbage_token_rejected() -> None:
    with pytest.raises(ValueError):
        verify_token("not-a-jwt")


def test_settings_require_database_url(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "")
    with pytest.raises(ValidationError, match="DATABASE_URL is required"):
        Settings(_env_file=None)


def test_settings_require_secret_key(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "")
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_discord_enabled_needs_token_and_guild(monkeypatch) -> None:
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    monkeypatch.delenv("DISCORD_GUILD_ID", raising=False)
    assert Settings(_env_file=None).discord_enabled is False

    monkeypatch.setenv("DISCORD_BOT_TOKEN", "bot-token")
    assert Settings(_env_file=None).discord_enabled is False

    monkeypatch.setenv("DISCORD_GUILD_ID", "111")
    assert Settings(_env_file=None).discord_enabled is True


def test_bulk_batch_size_must_be_positive(monkeypatch) -> None:
    monkeypatch.setenv("BULK_BATCH_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_admin_claim() -> None:
    assert is_admin_claims({"sub": "admin-1", "role": "admin"})
    assert not is_admin_claims({"sub": "user-1", "role": "member"})
    assert not is_admin_claims({"sub": "user-1"})
