"""Core: config, constants, and application bootstrap."""

from guildsync.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
