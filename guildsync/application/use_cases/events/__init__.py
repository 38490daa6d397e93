"""Event management and event voice access use cases."""

from guildsync.application.use_cases.events.event_access import EventAccessService
from guildsync.application.use_cases.events.event_operations import EventService

__all__ = ["EventAccessService", "EventService"]
