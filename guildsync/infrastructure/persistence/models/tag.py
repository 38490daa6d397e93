"""Tag ORM model. Skill/achievement labels, optionally mirrored to guild roles."""

from sqlalchemy import Boolean, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from guildsync.core.constants import DEFAULT_TAG_COLOR, DEFAULT_TAG_ICON
from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Tag(CuidMixin, TimestampMixin, Base):
    """Tag. Table: tag. name is lowercase snake_case and unique."""

    __tablename__ = "tag"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="skill")
    color: Mapped[str] = mapped_column(String(7), nullable=False, default=DEFAULT_TAG_COLOR)
    icon: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_TAG_ICON)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_assignable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_earnable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remote_role_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
