"""Service interfaces (ports) for external collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from guildsync.application.dtos.remote import RemoteMember, ScheduledEventSpec


class IRemoteGuildAdapter(Protocol):
    """Remote chat guild capabilities.

    Every method raises RemoteSyncError on failure (HTTP error, timeout, rate
    limit exhausted, remote not configured). Absence of a member is not a
    failure: get_member and get_member_current_managed_roles return None.
    """

    async def ensure_role_exists(
        self,
        name: str,
        color: int | None = None,
        permissions: list[str] | None = None,
        hoist: bool = False,
        mentionable: bool = False,
    ) -> str:
        """Return the id of the guild role named name, creating it if absent."""

    async def update_role(self, remote_role_id: str, patch: dict[str, Any]) -> None: ...

    async def delete_role(self, remote_role_id: str) -> None:
        """Delete a guild role; already-deleted roles are not an error."""

    async def add_member_to_role(self, remote_user_id: str, remote_role_id: str) -> None: ...

    async def remove_member_from_role(self, remote_user_id: str, remote_role_id: str) -> None: ...

    async def get_member(self, remote_user_id: str) -> RemoteMember | None:
        """Return the guild member, or None when the user is not in the guild."""

    async def get_member_current_managed_roles(self, remote_user_id: str) -> set[str] | None:
        """Return names of the member's assignable roles (no @everyone, no integration roles)."""

    async def create_channel_permission_overwrite(
        self,
        channel_id: str,
        remote_user_id: str,
        allow: list[str],
        deny: list[str],
        reason: str | None = None,
    ) -> None: ...

    async def delete_channel_permission_overwrite(
        self, channel_id: str, remote_user_id: str, reason: str | None = None
    ) -> None: ...

    async def disconnect_member_from_voice(self, remote_user_id: str, reason: str) -> None: ...

    async def create_temporary_event_role(self, title: str, channel_id: str) -> str | None:
        """Create the per-event role with channel access; None when the channel is unusable."""

    async def delete_temporary_event_role(self, remote_role_id: str) -> None: ...

    async def create_scheduled_event(self, spec: ScheduledEventSpec) -> str:
        """Create a guild scheduled event and return its id."""

    async def update_scheduled_event(self, remote_event_id: str, spec: ScheduledEventSpec) -> None: ...

    async def delete_scheduled_event(self, remote_event_id: str) -> None: ...
