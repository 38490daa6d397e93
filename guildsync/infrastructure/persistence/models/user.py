"""User ORM model: the identity holder and its linked Discord account."""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from guildsync.infrastructure.persistence.database import Base
from guildsync.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class User(CuidMixin, TimestampMixin, Base):
    """User. Table: app_user. remote_user_id is the Discord snowflake, unique when set."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    remote_user_id: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True
    )
    remote_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
