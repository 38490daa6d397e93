"""Activity log ORM model. Append-only record of role, tag and event changes."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Connection, DateTime, String, event, text
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from guildsync.infrastructure.persistence.database import Base
from guildsync.shared.utils.generators import generate_cuid


class ActivityLog(Base):
    """Activity entry: who did what to which entity. No update/delete."""

    __tablename__ = "activity_log"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    actor_type: Mapped[str] = mapped_column(String(10), nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )


@event.listens_for(ActivityLog, "before_update")
def _prevent_activity_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: ActivityLog
) -> None:
    """Activity entries are append-only; updates are forbidden."""
    raise ValueError("Activity log entries are immutable and cannot be updated.")


@event.listens_for(ActivityLog, "before_delete")
def _prevent_activity_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: ActivityLog
) -> None:
    raise ValueError("Activity log entries cannot be deleted.")
