"""Repository interfaces (ports) for the application layer.

Protocols define what the services need from storage. Every repository of a
unit of work shares one session and one transaction; nothing here commits.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from guildsync.application.dtos.event import (
        EventCreate,
        EventListFilter,
        EventResult,
        VoiceAccessResult,
    )
    from guildsync.application.dtos.role import (
        RoleCreate,
        RoleListFilter,
        RoleResult,
        RoleUpdate,
        UserRoleGrantResult,
    )
    from guildsync.application.dtos.tag import (
        TagCreate,
        TagListFilter,
        TagResult,
        TagUpdate,
        UserTagResult,
    )
    from guildsync.application.dtos.user import UserResult
    from guildsync.domain.enums import EventStatus, GrantAction, ParticipantStatus
    from guildsync.shared.enums import ActivityAction, ActorType, EntityType


class IRoleRepository(Protocol):
    """Role store."""

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return role by id (archived included)."""

    async def get_by_name(
        self, name: str, *, include_archived: bool = False
    ) -> RoleResult | None:
        """Return role by unique name."""

    async def get_by_names(self, names: Iterable[str]) -> list[RoleResult]:
        """Return the non-archived roles whose names are in names."""

    async def list_roles(self, filters: RoleListFilter) -> tuple[list[RoleResult], int]:
        """Return one page of roles and the total matching count."""

    async def list_synced(self) -> list[RoleResult]:
        """Return non-archived roles that have a remote counterpart."""

    async def create_role(self, data: RoleCreate) -> RoleResult:
        """Insert a role."""

    async def update_role(self, role_id: str, patch: RoleUpdate) -> RoleResult | None:
        """Apply a partial update; None if the role does not exist."""

    async def set_remote_role_id(self, role_id: str, remote_role_id: str | None) -> None:
        """Store (or clear) the correlated remote role id."""

    async def archive(self, role_id: str) -> RoleResult | None:
        """Soft-delete; None if the role does not exist."""


class IUserRoleRepository(Protocol):
    """User-role grant ledger (one row per user/role pair)."""

    async def get_grant(self, user_id: str, role_id: str) -> UserRoleGrantResult | None:
        """Return the ledger row for the pair, active or not."""

    async def grant(
        self,
        user_id: str,
        role_id: str,
        granted_by: str | None,
        reason: str,
    ) -> tuple[GrantAction, UserRoleGrantResult]:
        """Insert, reactivate or skip according to grant_transition."""

    async def revoke(
        self,
        user_id: str,
        role_id: str,
        revoked_by: str | None,
        reason: str,
    ) -> UserRoleGrantResult | None:
        """Revoke an active grant; None when there is none."""

    async def get_active_roles(self, user_id: str) -> list[RoleResult]:
        """Return non-archived roles the user actively holds."""

    async def count_active_for_role(self, role_id: str) -> int:
        """Return how many active grants reference the role."""


class ITagRepository(Protocol):
    """Tag store."""

    async def get_by_id(self, tag_id: str) -> TagResult | None: ...

    async def get_by_name(
        self, name: str, *, include_archived: bool = False
    ) -> TagResult | None: ...

    async def get_by_names(self, names: Iterable[str]) -> list[TagResult]:
        """Return the non-archived tags whose names are in names."""

    async def list_tags(self, filters: TagListFilter) -> tuple[list[TagResult], int]: ...

    async def list_synced(self) -> list[TagResult]:
        """Return non-archived tags that have a remote role."""

    async def create_tag(self, data: TagCreate) -> TagResult: ...

    async def update_tag(self, tag_id: str, patch: TagUpdate) -> TagResult | None: ...

    async def set_remote_role_id(self, tag_id: str, remote_role_id: str | None) -> None: ...

    async def archive(self, tag_id: str) -> TagResult | None: ...


class IUserTagRepository(Protocol):
    """User-tag grant ledger (one row per user/tag pair, at most one primary)."""

    async def get_grant(self, user_id: str, tag_id: str) -> UserTagResult | None: ...

    async def grant(
        self,
        user_id: str,
        tag_id: str,
        granted_by: str | None,
        reason: str,
        notes: str | None = None,
    ) -> tuple[GrantAction, UserTagResult]:
        """Insert, reactivate or skip according to grant_transition."""

    async def revoke(
        self,
        user_id: str,
        tag_id: str,
        revoked_by: str | None,
        reason: str,
    ) -> UserTagResult | None:
        """Revoke an active grant (clearing its primary flag); None when there is none."""

    async def clear_primary(self, user_id: str) -> int:
        """Unset is_primary on all of the user's rows; return how many changed."""

    async def set_primary(self, user_id: str, tag_id: str) -> bool:
        """Mark the active grant primary; False when the user does not hold it."""

    async def get_active_tags(self, user_id: str) -> list[UserTagResult]:
        """Return the user's active grants on non-archived tags."""

    async def count_active_for_tag(self, tag_id: str) -> int: ...

    async def list_active_user_ids(self, tag_id: str) -> list[str]:
        """Return users actively holding the tag."""


class IUserRepository(Protocol):
    """Read access to users and their linked remote identity."""

    async def get_by_id(self, user_id: str) -> UserResult | None: ...

    async def get_remote_identity(self, user_id: str) -> str | None:
        """Return the linked Discord user id, or None when not linked."""


class IEventRepository(Protocol):
    """Event store."""

    async def get_by_id(
        self, event_id: str, *, include_archived: bool = False
    ) -> EventResult | None: ...

    async def lock(self, event_id: str) -> EventResult | None:
        """Return the event row locked for update within the current transaction."""

    async def list_events(self, filters: EventListFilter) -> tuple[list[EventResult], int]: ...

    async def create_event(self, data: EventCreate, created_by: str | None) -> EventResult: ...

    async def update_event(self, event_id: str, values: dict[str, Any]) -> EventResult | None:
        """Set the given columns; None when the event does not exist."""

    async def set_status(self, event_id: str, status: EventStatus) -> EventResult | None: ...

    async def archive(self, event_id: str) -> EventResult | None: ...


class IEventAccessRepository(Protocol):
    """Event voice access rows and participant records."""

    async def get_access(self, event_id: str, user_id: str) -> VoiceAccessResult | None: ...

    async def count_active(self, event_id: str) -> int: ...

    async def list_active(self, event_id: str) -> list[VoiceAccessResult]: ...

    async def grant_access(
        self,
        event_id: str,
        user_id: str,
        remote_user_id: str,
        granted_by: str | None,
    ) -> VoiceAccessResult:
        """Create or reactivate the (event, user) row as ACTIVE."""

    async def revoke_access(
        self, event_id: str, user_id: str, reason: str
    ) -> VoiceAccessResult | None:
        """Flip an ACTIVE row to REVOKED; None when not active."""

    async def revoke_all(self, event_id: str, reason: str) -> int:
        """Flip every ACTIVE row of the event to REVOKED; return the count."""

    async def upsert_participant(
        self, event_id: str, user_id: str, status: ParticipantStatus
    ) -> None: ...


class IActivityLog(Protocol):
    """Append-only activity log sink."""

    async def record(
        self,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: str,
        details: dict[str, Any] | None = None,
        *,
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
    ) -> None:
        """Append one entry; actor defaults to the request context."""


class IUnitOfWork(Protocol):
    """One session and one transaction shared by all repositories.

    Use as `async with uow_factory() as uow:`; call commit() to persist.
    Leaving the block without commit (or with an exception) rolls back.
    """

    roles: IRoleRepository
    user_roles: IUserRoleRepository
    tags: ITagRepository
    user_tags: IUserTagRepository
    users: IUserRepository
    events: IEventRepository
    event_access: IEventAccessRepository
    activity: IActivityLog

    async def __aenter__(self) -> IUnitOfWork: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
