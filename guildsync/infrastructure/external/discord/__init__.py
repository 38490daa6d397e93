"""Discord REST adapter for the remote guild port."""

from guildsync.infrastructure.external.discord.client import (
    DiscordRestClient,
    build_http_client,
)
from guildsync.infrastructure.external.discord.guild_adapter import (
    DiscordGuildAdapter,
    DisabledGuildAdapter,
)

__all__ = [
    "DisabledGuildAdapter",
    "DiscordGuildAdapter",
    "DiscordRestClient",
    "build_http_client",
]
