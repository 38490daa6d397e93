"""Role ORM model. Platform roles mirrored to guild roles."""

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Role(CuidMixin, TimestampMixin, Base):
    """Role. Table: role. name is unique among non-archived roles."""

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_system_role: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remote_role_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    hoist: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mentionable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index(
            "uq_role_name_active",
            "name",
            unique=True,
            postgresql_where=text("NOT is_archived"),
            sqlite_where=text("NOT is_archived"),
        ),
    )
