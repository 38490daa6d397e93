"""Domain layer: enums, exceptions and entities with pure state transitions."""
