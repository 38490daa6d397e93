"""Helpers shared by the public service operations.

Internal code raises GuildSyncException subclasses; run_operation turns the
outcome of one public operation into an OperationResult. Any other exception
is logged with its traceback and returned as the operation's failure code, so
no error crosses a public method.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from guildsync.application.dtos.result import OperationResult
from guildsync.application.interfaces.repositories import IUnitOfWork
from guildsync.domain.exceptions import GuildSyncException
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

UnitOfWorkFactory = Callable[[], IUnitOfWork]


async def run_operation(
    operation: Awaitable[T | OperationResult[T]],
    *,
    name: str,
    failure_code: str = "INTERNAL_ERROR",
) -> OperationResult[T]:
    """Await operation and wrap its value (or domain error) in an OperationResult.

    An operation may return an OperationResult itself for soft failures that
    carry data (e.g. member not in guild).
    """
    try:
        value = await operation
    except GuildSyncException as exc:
        return OperationResult.from_exception(exc)
    except Exception:
        logger.exception("Operation %s failed unexpectedly", name)
        return OperationResult.fail(failure_code, f"{name} failed unexpectedly")
    if isinstance(value, OperationResult):
        return value
    return OperationResult.ok(value)


def batched(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive chunks of at most size."""
    return [items[i : i + size] for i in range(0, len(items), size)]


async def gather_in_batches(
    items: Sequence[T],
    size: int,
    worker: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Run worker over items; concurrent within a batch, batches sequential."""
    outcomes: list[R] = []
    for chunk in batched(items, size):
        outcomes.extend(await asyncio.gather(*(worker(item) for item in chunk)))
    return outcomes


async def record_activity(
    uow_factory: UnitOfWorkFactory,
    entries: Sequence[tuple[ActivityAction, EntityType, str, dict[str, Any]]],
    *,
    actor_id: str | None = None,
) -> None:
    """Write activity entries in their own unit of work after a remote step.

    The change being described is already committed; a failure here is logged.
    """
    if not entries:
        return
    try:
        async with uow_factory() as uow:
            for action, entity_type, entity_id, details in entries:
                await uow.activity.record(
                    action, entity_type, entity_id, details, actor_id=actor_id
                )
            await uow.commit()
    except SQLAlchemyError:
        logger.exception(
            "Failed to record %d activity entries (%s)",
            len(entries),
            ", ".join(sorted({e[0].value for e in entries})),
        )
