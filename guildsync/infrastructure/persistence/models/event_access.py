"""Event voice access and participant ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin


class EventVoiceAccess(CuidMixin, Base):
    """Voice access for one user at one event. Table: event_voice_access.

    Unique (event_id, user_id): re-granting flips the same row back to active.
    """

    __tablename__ = "event_voice_access"

    event_id: Mapped[str] = mapped_column(
        String, ForeignKey("event.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    remote_user_id: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="active")
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    granted_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoke_reason: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_voice_access_event_user"),
    )


class EventParticipant(CuidMixin, Base):
    """Participation record. Table: event_participant. Unique (event_id, user_id)."""

    __tablename__ = "event_participant"

    event_id: Mapped[str] = mapped_column(
        String, ForeignKey("event.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="registered")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participant_event_user"),
    )
