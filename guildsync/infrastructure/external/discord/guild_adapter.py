"""Discord guild adapter (implements IRemoteGuildAdapter).

Every method raises RemoteSyncError on failure. The engines decide whether a
failure is fatal; the adapter never swallows one.
"""

from __future__ import annotations

from typing import Any

from guildsync.application.dtos.remote import RemoteMember, ScheduledEventSpec
from guildsync.core.constants import EVENT_ROLE_COLOR, EVENT_ROLE_PREFIX
from guildsync.domain.exceptions import RemoteSyncError
from guildsync.infrastructure.external.discord.client import DiscordRestClient
from guildsync.infrastructure.external.discord.permissions import (
    EVENT_ROLE_CHANNEL_PERMISSIONS,
    permission_bits,
)
from guildsync.shared.telemetry.logging import get_logger
from guildsync.shared.utils.colors import hex_to_int

logger = get_logger(__name__)

# Discord channel types that can host a voice event.
_VOICE_CHANNEL_TYPES = {2: "voice", 13: "stage"}

# Overwrite target types.
_OVERWRITE_ROLE = 0
_OVERWRITE_MEMBER = 1

# Scheduled event enums.
_PRIVACY_GUILD_ONLY = 2
_ENTITY_STAGE = 1
_ENTITY_VOICE = 2
_SCHEDULED_EVENT_STATUS = {"scheduled": 1, "active": 2, "completed": 3, "cancelled": 4}


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


class DiscordGuildAdapter:
    """Guild role, channel overwrite, voice and scheduled-event operations for one guild."""

    def __init__(self, client: DiscordRestClient, guild_id: str) -> None:
        self.client = client
        self.guild_id = guild_id

    @property
    def _guild(self) -> str:
        return f"/guilds/{self.guild_id}"

    async def _list_roles(self) -> list[dict[str, Any]]:
        return await self.client.get(f"{self._guild}/roles") or []

    async def ensure_role_exists(
        self,
        name: str,
        color: int | None = None,
        permissions: list[str] | None = None,
        hoist: bool = False,
        mentionable: bool = False,
    ) -> str:
        """Return the id of the role named name, creating it if absent."""
        for role in await self._list_roles():
            if role.get("name") == name:
                return str(role["id"])
        payload: dict[str, Any] = {
            "name": name,
            "permissions": str(permission_bits(permissions or [])),
            "hoist": hoist,
            "mentionable": mentionable,
        }
        if color is not None:
            payload["color"] = color
        created = await self.client.post(
            f"{self._guild}/roles", payload, reason=f"Sync platform role {name}"
        )
        logger.info("Created Discord role %s (%s)", name, created["id"])
        return str(created["id"])

    async def update_role(self, remote_role_id: str, patch: dict[str, Any]) -> None:
        """Mirror changed attributes. Accepts name, color, permissions, hoist, mentionable."""
        payload: dict[str, Any] = {}
        for key, value in patch.items():
            if key == "color":
                payload["color"] = hex_to_int(value)
            elif key == "permissions":
                payload["permissions"] = str(permission_bits(value))
            elif key in ("name", "hoist", "mentionable"):
                payload[key] = value
        if not payload:
            return
        await self.client.patch(f"{self._guild}/roles/{remote_role_id}", payload)

    async def delete_role(self, remote_role_id: str) -> None:
        await self.client.delete(f"{self._guild}/roles/{remote_role_id}", allow_404=True)

    async def add_member_to_role(self, remote_user_id: str, remote_role_id: str) -> None:
        await self.client.put(f"{self._guild}/members/{remote_user_id}/roles/{remote_role_id}")

    async def remove_member_from_role(self, remote_user_id: str, remote_role_id: str) -> None:
        await self.client.delete(
            f"{self._guild}/members/{remote_user_id}/roles/{remote_role_id}",
            allow_404=True,
        )

    async def get_member(self, remote_user_id: str) -> RemoteMember | None:
        """Return the member with role ids and current voice channel; None if not in the guild."""
        member = await self.client.get(
            f"{self._guild}/members/{remote_user_id}", allow_404=True
        )
        if member is None:
            return None
        voice = await self.client.get(
            f"{self._guild}/voice-states/{remote_user_id}", allow_404=True
        )
        return RemoteMember(
            id=remote_user_id,
            role_ids=frozenset(str(r) for r in member.get("roles", [])),
            voice_channel_id=(voice or {}).get("channel_id"),
        )

    async def get_member_current_managed_roles(self, remote_user_id: str) -> set[str] | None:
        """Return names of the member's assignable roles; None if not in the guild.

        @everyone (id == guild id) and integration-managed roles are excluded.
        """
        member = await self.client.get(
            f"{self._guild}/members/{remote_user_id}", allow_404=True
        )
        if member is None:
            return None
        held = {str(r) for r in member.get("roles", [])}
        return {
            role["name"]
            for role in await self._list_roles()
            if str(role["id"]) in held
            and str(role["id"]) != self.guild_id
            and not role.get("managed", False)
        }

    async def create_channel_permission_overwrite(
        self,
        channel_id: str,
        remote_user_id: str,
        allow: list[str],
        deny: list[str],
        reason: str | None = None,
    ) -> None:
        await self.client.put(
            f"/channels/{channel_id}/permissions/{remote_user_id}",
            {
                "type": _OVERWRITE_MEMBER,
                "allow": str(permission_bits(allow)),
                "deny": str(permission_bits(deny)),
            },
            reason=reason,
        )

    async def delete_channel_permission_overwrite(
        self, channel_id: str, remote_user_id: str, reason: str | None = None
    ) -> None:
        await self.client.delete(
            f"/channels/{channel_id}/permissions/{remote_user_id}",
            reason=reason,
            allow_404=True,
        )

    async def disconnect_member_from_voice(self, remote_user_id: str, reason: str) -> None:
        await self.client.patch(
            f"{self._guild}/members/{remote_user_id}", {"channel_id": None}, reason=reason
        )

    async def create_temporary_event_role(self, title: str, channel_id: str) -> str | None:
        """Create '🎪 {title}' with voice access on channel_id.

        Returns None when the channel does not exist or is not a voice/stage channel.
        """
        channel = await self.client.get(f"/channels/{channel_id}", allow_404=True)
        if channel is None or channel.get("type") not in _VOICE_CHANNEL_TYPES:
            logger.error(
                "Invalid channel for event role: channel_id=%s type=%s",
                channel_id,
                None if channel is None else channel.get("type"),
            )
            return None
        role = await self.client.post(
            f"{self._guild}/roles",
            {
                "name": f"{EVENT_ROLE_PREFIX}{title}",
                "color": EVENT_ROLE_COLOR,
                "permissions": "0",
                "hoist": False,
                "mentionable": False,
            },
            reason=f"Temporary role for event: {title}",
        )
        role_id = str(role["id"])
        await self.client.put(
            f"/channels/{channel_id}/permissions/{role_id}",
            {
                "type": _OVERWRITE_ROLE,
                "allow": str(permission_bits(EVENT_ROLE_CHANNEL_PERMISSIONS)),
                "deny": "0",
            },
            reason=f"Event role permissions for {title}",
        )
        logger.info(
            "Event role created: role_id=%s title=%s channel_id=%s", role_id, title, channel_id
        )
        return role_id

    async def delete_temporary_event_role(self, remote_role_id: str) -> None:
        await self.client.delete(
            f"{self._guild}/roles/{remote_role_id}",
            reason="Event ended",
            allow_404=True,
        )

    def _scheduled_event_payload(self, spec: ScheduledEventSpec) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if spec.name is not None:
            payload["name"] = spec.name
        if spec.description is not None:
            payload["description"] = spec.description
        if spec.start_time is not None:
            payload["scheduled_start_time"] = _isoformat(spec.start_time)
        if spec.end_time is not None:
            payload["scheduled_end_time"] = _isoformat(spec.end_time)
        if spec.channel_id is not None:
            payload["channel_id"] = spec.channel_id
        if spec.status is not None:
            payload["status"] = _SCHEDULED_EVENT_STATUS[spec.status]
        return payload

    async def create_scheduled_event(self, spec: ScheduledEventSpec) -> str:
        payload = self._scheduled_event_payload(spec)
        payload.pop("status", None)
        payload["privacy_level"] = _PRIVACY_GUILD_ONLY
        payload["entity_type"] = _ENTITY_STAGE if spec.is_stage else _ENTITY_VOICE
        created = await self.client.post(f"{self._guild}/scheduled-events", payload)
        return str(created["id"])

    async def update_scheduled_event(self, remote_event_id: str, spec: ScheduledEventSpec) -> None:
        payload = self._scheduled_event_payload(spec)
        if payload:
            await self.client.patch(
                f"{self._guild}/scheduled-events/{remote_event_id}", payload
            )

    async def delete_scheduled_event(self, remote_event_id: str) -> None:
        await self.client.delete(
            f"{self._guild}/scheduled-events/{remote_event_id}", allow_404=True
        )


class DisabledGuildAdapter:
    """Adapter used when no bot token or guild id is configured.

    Every call raises RemoteSyncError, so local writes still succeed and the
    remote step surfaces as a sync warning.
    """

    async def _unavailable(self, *_args: Any, **_kwargs: Any) -> Any:
        raise RemoteSyncError("remote guild not configured")

    ensure_role_exists = _unavailable
    update_role = _unavailable
    delete_role = _unavailable
    add_member_to_role = _unavailable
    remove_member_from_role = _unavailable
    get_member = _unavailable
    get_member_current_managed_roles = _unavailable
    create_channel_permission_overwrite = _unavailable
    delete_channel_permission_overwrite = _unavailable
    disconnect_member_from_voice = _unavailable
    create_temporary_event_role = _unavailable
    delete_temporary_event_role = _unavailable
    create_scheduled_event = _unavailable
    update_scheduled_event = _unavailable
    delete_scheduled_event = _unavailable
