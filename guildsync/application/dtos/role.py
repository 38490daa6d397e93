"""DTOs for role store and role reconciliation use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RoleResult:
    """Role read-model."""

    id: str
    name: str
    description: str | None
    color: str | None
    sort_order: int
    is_system_role: bool
    remote_role_id: str | None
    is_archived: bool
    permissions: tuple[str, ...] = ()
    hoist: bool = False
    mentionable: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RoleCreate:
    """Input for creating a role."""

    name: str
    description: str | None = None
    color: str | None = None
    sort_order: int = 0
    is_system_role: bool = False
    permissions: tuple[str, ...] = ()
    hoist: bool = False
    mentionable: bool = False


@dataclass(frozen=True)
class RoleUpdate:
    """Partial role update; None means unchanged."""

    name: str | None = None
    description: str | None = None
    color: str | None = None
    sort_order: int | None = None
    permissions: tuple[str, ...] | None = None
    hoist: bool | None = None
    mentionable: bool | None = None

    def changed_fields(self) -> dict[str, object]:
        """Return only the fields that were set."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass(frozen=True)
class RoleListFilter:
    """Search, filter, sort and pagination for list_roles."""

    search: str | None = None
    is_system_role: bool | None = None
    include_archived: bool = False
    sort_by: str = "sort_order"
    sort_order: str = "asc"
    page: int = 1
    limit: int = 50


@dataclass(frozen=True)
class RoleList:
    items: list[RoleResult]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class RoleMutationResult:
    """Role after a store mutation plus any remote mirroring warnings."""

    role: RoleResult
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UserRoleGrantResult:
    """One user-role ledger row."""

    id: str
    user_id: str
    role_id: str
    role_name: str
    granted_at: datetime
    granted_by: str | None
    grant_reason: str
    revoked_at: datetime | None
    revoked_by: str | None
    revoke_reason: str | None
    is_system_granted: bool

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None


@dataclass(frozen=True)
class ApplyRolesResult:
    applied_roles: list[str]
    skipped_roles: list[str]
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RemoveRolesResult:
    revoked_roles: list[str]
    skipped_roles: list[str]
    sync_warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RoleSyncError:
    """Failure to add or remove one remote role during reconciliation."""

    role_name: str
    operation: str
    message: str


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of diffing local grants against remote membership.

    actor_present is False when the user has no linked account or is not a
    guild member; added/removed are then empty.
    """

    added: list[str]
    removed: list[str]
    errors: list[RoleSyncError]
    actor_present: bool = True


@dataclass(frozen=True)
class RoleAssignment:
    """One entry of a bulk role assignment."""

    user_id: str
    role_names: tuple[str, ...]
    granted_by: str | None = None
    reason: str | None = None
    sync_remote: bool = True


@dataclass(frozen=True)
class BulkItem(Generic[T]):
    """Per-user outcome of a bulk operation."""

    user_id: str
    result: T


@dataclass(frozen=True)
class BulkItemError:
    user_id: str
    code: str
    message: str


@dataclass(frozen=True)
class BulkResult(Generic[T]):
    """Aggregate of a batched bulk operation. One failure never aborts the rest."""

    success: int
    failed: int
    results: list[BulkItem[T]]
    errors: list[BulkItemError]
