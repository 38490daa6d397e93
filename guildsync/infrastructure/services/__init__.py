"""Infrastructure services (activity log sink)."""

from guildsync.infrastructure.services.activity_log_service import ActivityLogService

__all__ = ["ActivityLogService"]
