"""DTOs for users (identity holder; no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model. remote_user_id is the linked Discord account, if any."""

    id: str
    username: str
    email: str | None
    remote_user_id: str | None
    remote_username: str | None
    is_active: bool
