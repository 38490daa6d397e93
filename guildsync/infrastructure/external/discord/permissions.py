"""Discord permission bit flags and helpers.

Names match the Discord API documentation; role and overwrite payloads carry
the combined bitfield as a decimal string.
"""

from collections.abc import Iterable

PERMISSION_BITS: dict[str, int] = {
    "CREATE_INSTANT_INVITE": 1 << 0,
    "KICK_MEMBERS": 1 << 1,
    "BAN_MEMBERS": 1 << 2,
    "ADMINISTRATOR": 1 << 3,
    "MANAGE_CHANNELS": 1 << 4,
    "MANAGE_GUILD": 1 << 5,
    "ADD_REACTIONS": 1 << 6,
    "VIEW_AUDIT_LOG": 1 << 7,
    "PRIORITY_SPEAKER": 1 << 8,
    "STREAM": 1 << 9,
    "VIEW_CHANNEL": 1 << 10,
    "SEND_MESSAGES": 1 << 11,
    "MANAGE_MESSAGES": 1 << 13,
    "EMBED_LINKS": 1 << 14,
    "ATTACH_FILES": 1 << 15,
    "READ_MESSAGE_HISTORY": 1 << 16,
    "MENTION_EVERYONE": 1 << 17,
    "CONNECT": 1 << 20,
    "SPEAK": 1 << 21,
    "MUTE_MEMBERS": 1 << 22,
    "DEAFEN_MEMBERS": 1 << 23,
    "MOVE_MEMBERS": 1 << 24,
    "USE_VAD": 1 << 25,
    "CHANGE_NICKNAME": 1 << 26,
    "MANAGE_NICKNAMES": 1 << 27,
    "MANAGE_ROLES": 1 << 28,
    "MODERATE_MEMBERS": 1 << 40,
}

# Channel access granted to the temporary event role.
EVENT_ROLE_CHANNEL_PERMISSIONS = ("VIEW_CHANNEL", "CONNECT", "SPEAK", "STREAM", "USE_VAD")


def permission_bits(names: Iterable[str]) -> int:
    """Combine permission names into one bitfield.

    Raises:
        ValueError: If a name is not a known Discord permission.
    """
    value = 0
    for name in names:
        try:
            value |= PERMISSION_BITS[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown Discord permission: {name}") from None
    return value


def is_known_permission(name: str) -> bool:
    return name.upper() in PERMISSION_BITS
