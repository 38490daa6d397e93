"""Event ORM model. Scheduled voice/stage sessions gated by prerequisites."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Event(CuidMixin, TimestampMixin, Base):
    """Event. Table: event. prerequisite_roles is a JSON list of role/tag names."""

    __tablename__ = "event"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[str] = mapped_column(String(10), nullable=False, default="voice")
    difficulty_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prerequisite_roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    remote_channel_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    remote_event_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    event_role_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (Index("ix_event_status_scheduled_at", "status", "scheduled_at"),)
