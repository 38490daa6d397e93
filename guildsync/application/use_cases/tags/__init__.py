"""Tag reconciliation use cases."""

from guildsync.application.use_cases.tags.tag_reconciliation import TagReconciliationEngine

__all__ = ["TagReconciliationEngine"]
