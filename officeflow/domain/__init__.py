"""Domain layer: enums, exceptions, task entity, policies and pure calculations."""
