"""Application layer: DTOs, repository ports, lifecycle and audit services."""
