"""Color helpers for mirroring hex colors to the remote guild."""

import re

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def hex_to_int(color: str | int | None) -> int | None:
    """Convert '#RRGGBB' to an int; ints and None pass through, invalid strings give None."""
    if color is None or isinstance(color, int):
        return color
    if not HEX_COLOR_PATTERN.match(color):
        return None
    return int(color[1:], 16)
