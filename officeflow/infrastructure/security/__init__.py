"""Security: JWT issue and verification for the acting user."""

from officeflow.infrastructure.security.jwt import (
    actor_from_token,
    create_access_token,
    create_actor_token,
    verify_token,
)

__all__ = [
    "actor_from_token",
    "create_access_token",
    "create_actor_token",
    "verify_token",
]
