"""Application lifespan: startup and shutdown.

Wiring only: logging, the shared Discord HTTP client, DB engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from guildsync.core.config import get_settings
from guildsync.infrastructure.external.discord import build_http_client
from guildsync.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit close the Discord client and dispose the engine."""
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    if settings.discord_enabled:
        app.state.discord_http_client = build_http_client(
            settings.discord_bot_token.get_secret_value(),
            settings.discord_api_base,
            settings.discord_request_timeout,
        )
        logger.info("Discord sync enabled for guild %s", settings.discord_guild_id)
    else:
        app.state.discord_http_client = None
        logger.warning("Discord bot token or guild id not set; remote sync disabled")

    yield

    # ---- Shutdown ----
    if getattr(app.state, "discord_http_client", None) is not None:
        await app.state.discord_http_client.aclose()
        app.state.discord_http_client = None
        logger.info("Discord HTTP client closed")

    from guildsync.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
    logger.info("Database engine disposed")
