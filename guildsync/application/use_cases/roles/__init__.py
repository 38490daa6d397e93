"""Role reconciliation use cases."""

from guildsync.application.use_cases.roles.role_reconciliation import RoleReconciliationEngine

__all__ = ["RoleReconciliationEngine"]
