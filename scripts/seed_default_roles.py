"""Create tables (optional) and seed the default platform roles.

Usage:
    uv run python -m scripts.seed_default_roles [--create-tables] [--sync-remote]
Idempotent: roles that already exist (archived included) are left alone.
--sync-remote also creates the matching guild roles when Discord is configured.
"""

import asyncio
import sys

import httpx

from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.services import RoleService
from guildsync.core.config import get_settings
from guildsync.infrastructure.external.discord import (
    DisabledGuildAdapter,
    DiscordGuildAdapter,
    DiscordRestClient,
    build_http_client,
)
from guildsync.infrastructure.persistence.database import (
    create_all,
    dispose_engine,
    get_session_factory,
)
from guildsync.infrastructure.persistence.unit_of_work import SqlUnitOfWork
from guildsync.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Seed default roles."""
    args = set(sys.argv[1:])
    settings = get_settings()
    setup_logging()
    if "--create-tables" in args:
        await create_all()

    http_client: httpx.AsyncClient | None = None
    adapter: IRemoteGuildAdapter = DisabledGuildAdapter()
    if "--sync-remote" in args and settings.discord_enabled:
        http_client = build_http_client(
            settings.discord_bot_token.get_secret_value(),
            settings.discord_api_base,
            settings.discord_request_timeout,
        )
        adapter = DiscordGuildAdapter(
            DiscordRestClient(http_client, max_retries=settings.discord_max_retries),
            settings.discord_guild_id,
        )

    session_factory = get_session_factory()
    service = RoleService(lambda: SqlUnitOfWork(session_factory), adapter)
    try:
        result = await service.seed_default_roles(sync_remote="--sync-remote" in args)
    finally:
        if http_client is not None:
            await http_client.aclose()
        await dispose_engine()

    if not result.success:
        print(f"Seeding failed: {result.error.code} {result.error.message}", file=sys.stderr)
        sys.exit(1)
    created = result.data
    print(f"Seeded {len(created)} role(s): {', '.join(created) or 'none (all present)'}")


if __name__ == "__main__":
    asyncio.run(main())
