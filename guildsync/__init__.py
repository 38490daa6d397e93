"""guildsync: role, tag and event-access reconciliation with a Discord guild."""
