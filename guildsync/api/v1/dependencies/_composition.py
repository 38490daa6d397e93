"""Presentation-layer dependency injection (composition root).

Services and engines are built here from infrastructure implementations;
routes depend only on these providers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from guildsync.api.v1.dependencies.db import get_uow_factory
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import UnitOfWorkFactory
from guildsync.application.services import RoleService, TagService
from guildsync.application.use_cases.events import EventAccessService, EventService
from guildsync.application.use_cases.roles import RoleReconciliationEngine
from guildsync.application.use_cases.tags import TagReconciliationEngine
from guildsync.core.config import get_settings
from guildsync.infrastructure.external.discord import (
    DisabledGuildAdapter,
    DiscordGuildAdapter,
    DiscordRestClient,
)

UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]


def get_remote_adapter(request: Request) -> IRemoteGuildAdapter:
    """Discord adapter over the shared client; disabled adapter when not configured."""
    settings = get_settings()
    http_client = getattr(request.app.state, "discord_http_client", None)
    if http_client is None or not settings.discord_enabled:
        return DisabledGuildAdapter()
    return DiscordGuildAdapter(
        DiscordRestClient(http_client, max_retries=settings.discord_max_retries),
        settings.discord_guild_id,
    )


AdapterDep = Annotated[IRemoteGuildAdapter, Depends(get_remote_adapter)]


def get_role_service(uow_factory: UowFactoryDep, adapter: AdapterDep) -> RoleService:
    return RoleService(uow_factory, adapter)


def get_role_engine(uow_factory: UowFactoryDep, adapter: AdapterDep) -> RoleReconciliationEngine:
    settings = get_settings()
    return RoleReconciliationEngine(
        uow_factory,
        adapter,
        batch_size=settings.bulk_batch_size,
        newbie_role_name=settings.newbie_role_name,
    )


def get_tag_engine(uow_factory: UowFactoryDep, adapter: AdapterDep) -> TagReconciliationEngine:
    return TagReconciliationEngine(
        uow_factory, adapter, batch_size=get_settings().bulk_batch_size
    )


def get_tag_service(
    uow_factory: UowFactoryDep,
    adapter: AdapterDep,
    tag_engine: Annotated[TagReconciliationEngine, Depends(get_tag_engine)],
) -> TagService:
    return TagService(
        uow_factory, adapter, tag_engine, batch_size=get_settings().bulk_batch_size
    )


def get_event_access_service(
    uow_factory: UowFactoryDep, adapter: AdapterDep
) -> EventAccessService:
    return EventAccessService(
        uow_factory, adapter, grace_minutes=get_settings().event_access_grace_minutes
    )


def get_event_service(
    uow_factory: UowFactoryDep,
    adapter: AdapterDep,
    access_service: Annotated[EventAccessService, Depends(get_event_access_service)],
) -> EventService:
    return EventService(uow_factory, adapter, access_service)
