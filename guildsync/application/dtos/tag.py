"""DTOs for tag store and tag reconciliation use cases."""

from dataclasses import dataclass, field
from datetime import datetime

from guildsync.core.constants import DEFAULT_TAG_COLOR, DEFAULT_TAG_ICON
from guildsync.domain.enums import TagCategory


@dataclass(frozen=True)
class TagResult:
    """Tag read-model."""

    id: str
    name: str
    display_name: str
    description: str | None
    category: TagCategory
    color: str
    icon: str
    is_active: bool
    is_assignable: bool
    is_earnable: bool
    remote_role_id: str | None
    is_archived: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class TagCreate:
    name: str
    display_name: str
    description: str | None = None
    category: TagCategory = TagCategory.SKILL
    color: str = DEFAULT_TAG_COLOR
    icon: str = DEFAULT_TAG_ICON
    is_active: bool = True
    is_assignable: bool = True
    is_earnable: bool = False


@dataclass(frozen=True)
class TagUpdate:
    """Partial tag update; None means unchanged."""

    name: str | None = None
    display_name: str | None = None
    description: str | None = None
    category: TagCategory | None = None
    color: str | None = None
    icon: str | None = None
    is_active: bool | None = None
    is_assignable: bool | None = None
    is_earnable: bool | None = None

    def changed_fields(self) -> dict[str, object]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass(frozen=True)
class TagListFilter:
    search: str | None = None
    category: TagCategory | None = None
    assignable_only: bool = False
    include_archived: bool = False
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class TagList:
    items: list[TagResult]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class TagMutationResult:
    tag: TagResult
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UserTagResult:
    """One user-tag ledger row with its tag."""

    id: str
    user_id: str
    tag: TagResult
    granted_at: datetime
    granted_by: str | None
    grant_reason: str
    revoked_at: datetime | None
    revoked_by: str | None
    revoke_reason: str | None
    is_primary: bool
    notes: str | None

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None


@dataclass(frozen=True)
class TagAssignResult:
    """skipped is True when the user already actively held the tag."""

    user_tag: UserTagResult
    skipped: bool = False
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TagRemoveResult:
    """skipped is True when the user did not hold the tag."""

    tag_name: str
    removed: bool
    skipped: bool
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TagSyncResult:
    """Outcome of replacing a member's tag roles wholesale."""

    removed: list[str]
    added: list[str]
    errors: list[str]
    actor_present: bool = True
