"""Grant ledger ORM models: user-role and user-tag.

One row per (user, role) and (user, tag) pair for all time; revocation sets
revoked_at and re-granting reactivates the same row.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin
from guildsync.infrastructure.persistence.models.role import Role
from guildsync.infrastructure.persistence.models.tag import Tag


class _GrantColumns:
    """Grant/revoke columns shared by both ledgers."""

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    granted_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    grant_reason: Mapped[str] = mapped_column(String(255), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    revoke_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)


class UserRoleGrant(CuidMixin, _GrantColumns, Base):
    """User-role ledger. Table: user_role. Unique (user_id, role_id)."""

    __tablename__ = "user_role"

    role_id: Mapped[str] = mapped_column(
        String, ForeignKey("role.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_system_granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    role: Mapped[Role] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_role_user_role"),
    )


class UserTagGrant(CuidMixin, _GrantColumns, Base):
    """User-tag ledger. Table: user_tag. Unique (user_id, tag_id); one active primary per user."""

    __tablename__ = "user_tag"

    tag_id: Mapped[str] = mapped_column(
        String, ForeignKey("tag.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_primary: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    tag: Mapped[Tag] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "tag_id", name="uq_user_tag_user_tag"),
        Index(
            "uq_user_tag_one_primary",
            "user_id",
            unique=True,
            postgresql_where=text("is_primary AND revoked_at IS NULL"),
            sqlite_where=text("is_primary AND revoked_at IS NULL"),
        ),
    )
