"""Use cases: role/tag reconciliation and event access."""
