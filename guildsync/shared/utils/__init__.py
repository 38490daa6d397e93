"""Shared utilities: datetime, colors and id generation."""

from guildsync.shared.utils.colors import HEX_COLOR_PATTERN, hex_to_int
from guildsync.shared.utils.datetime import ensure_utc, minutes_until, utc_now
from guildsync.shared.utils.generators import generate_cuid

__all__ = [
    "HEX_COLOR_PATTERN",
    "ensure_utc",
    "generate_cuid",
    "hex_to_int",
    "minutes_until",
    "utc_now",
]
