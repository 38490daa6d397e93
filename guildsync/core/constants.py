"""Core constants: reconciliation defaults and the default role catalogue."""

from typing import Any

DEFAULT_GRANT_REASON = "System role assignment"
DEFAULT_REVOKE_REASON = "Role removed"
DEFAULT_TAG_GRANT_REASON = "Tag assigned"
DEFAULT_TAG_REVOKE_REASON = "Tag removed"

DEFAULT_TAG_COLOR = "#6B7280"
DEFAULT_TAG_ICON = "🏷️"
TAG_NAME_PATTERN = r"^[a-z0-9_]+$"

# Temporary per-event role
EVENT_ROLE_PREFIX = "🎪 "
EVENT_ROLE_COLOR = 0x00AE86

# Direct per-user voice channel overwrite for event access
EVENT_ACCESS_ALLOW = ("VIEW_CHANNEL", "CONNECT", "SPEAK")
EVENT_ACCESS_DENY = ("STREAM", "USE_VAD")

# Revoke reasons that also force a voice disconnect
DISCONNECT_REVOKE_REASONS = frozenset({"admin_revoked", "event_ended"})

# Scheduled events without a duration are assumed to last this long
DEFAULT_EVENT_DURATION_MINUTES = 60

DEFAULT_ROLES: tuple[dict[str, Any], ...] = (
    {
        "name": "ADMIN",
        "description": "Platform administrators with full access",
        "color": "#FF0000",
        "sort_order": 0,
        "is_system_role": True,
        "permissions": ["ADMINISTRATOR"],
        "hoist": True,
        "mentionable": False,
    },
    {
        "name": "MODERATOR",
        "description": "Community moderators who conduct final reviews",
        "color": "#FF8C00",
        "sort_order": 0,
        "is_system_role": True,
        "permissions": ["MANAGE_MESSAGES", "MANAGE_CHANNELS", "KICK_MEMBERS", "MUTE_MEMBERS"],
        "hoist": True,
        "mentionable": True,
    },
    {
        "name": "MEMBER",
        "description": "Active community members with full platform access",
        "color": "#00FF00",
        "sort_order": 0,
        "is_system_role": True,
        "permissions": ["SEND_MESSAGES", "CONNECT", "SPEAK"],
        "hoist": False,
        "mentionable": True,
    },
    {
        "name": "NEWBIE",
        "description": "New users starting out on the platform",
        "color": "#87CEEB",
        "sort_order": 0,
        "is_system_role": True,
        "permissions": ["SEND_MESSAGES", "CONNECT"],
        "hoist": False,
        "mentionable": True,
    },
    {
        "name": "REVIEWER",
        "description": "Users qualified to review peer submissions",
        "color": "#9370DB",
        "sort_order": 1,
        "is_system_role": False,
        "permissions": ["SEND_MESSAGES", "CONNECT", "SPEAK"],
        "hoist": False,
        "mentionable": True,
    },
    {
        "name": "MENTOR",
        "description": "Experienced members who guide others",
        "color": "#FFD700",
        "sort_order": 1,
        "is_system_role": False,
        "permissions": ["SEND_MESSAGES", "CONNECT", "SPEAK", "PRIORITY_SPEAKER"],
        "hoist": True,
        "mentionable": True,
    },
    {
        "name": "EXPERT",
        "description": "Advanced users with deep domain knowledge",
        "color": "#8A2BE2",
        "sort_order": 1,
        "is_system_role": False,
        "permissions": ["SEND_MESSAGES", "CONNECT", "SPEAK", "PRIORITY_SPEAKER"],
        "hoist": True,
        "mentionable": True,
    },
)
