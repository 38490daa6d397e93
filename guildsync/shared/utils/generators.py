"""Identifier generators."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new CUID2 string (primary keys for every table)."""
    value = _cuid()
    if not isinstance(value, str):
        raise TypeError(f"cuid2 returned {type(value).__name__}, expected str")
    return value
