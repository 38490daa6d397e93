"""Activity log service: appends ActivityLog rows (implements IActivityLog).

Rows are added to the caller's session, so an entry commits or rolls back
together with the change it describes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.infrastructure.persistence.models.activity_log import ActivityLog
from guildsync.shared.context import get_current_actor_id, get_current_actor_type
from guildsync.shared.enums import ActivityAction, ActorType, EntityType
from guildsync.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _json_safe(value: Any) -> Any:
    """Convert enums and datetimes (and containers of them) so details serialize as JSON."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_json_safe(v) for v in value]
    return value


class ActivityLogService:
    """Append-only activity sink bound to one session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def record(
        self,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: str,
        details: dict[str, Any] | None = None,
        *,
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
    ) -> None:
        """Append one entry. Actor falls back to the request context."""
        resolved_actor_id = actor_id if actor_id is not None else get_current_actor_id()
        resolved_actor_type = actor_type or (
            get_current_actor_type() if resolved_actor_id else ActorType.SYSTEM
        )
        self.db.add(
            ActivityLog(
                actor_id=resolved_actor_id,
                actor_type=resolved_actor_type.value,
                action=action.value,
                entity_type=entity_type.value,
                entity_id=entity_id,
                details=_json_safe(details) if details else None,
            )
        )
        await self.db.flush()
        logger.debug(
            "Activity %s on %s %s by %s",
            action.value,
            entity_type.value,
            entity_id,
            resolved_actor_id or "system",
        )
