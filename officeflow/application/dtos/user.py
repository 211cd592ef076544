"""DTOs for the user directory collaborator (read-only)."""

from __future__ import annotations

from dataclasses import dataclass

from officeflow.domain.enums import Role


@dataclass(frozen=True)
class UserResult:
    """User as seen by the lifecycle engine: identity, role and active flag."""

    id: int
    name: str
    username: str
    role: Role
    is_active: bool
