"""Actor dependencies: who is calling and may they call this route."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from officeflow.domain.enums import Role
from officeflow.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    MissingActorException,
)
from officeflow.shared.context import ActorContext

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_actor_optional(request: Request) -> ActorContext | None:
    """Actor resolved by ActorContextMiddleware, or None for anonymous requests."""
    return getattr(request.state, "actor", None)


async def get_current_actor(
    actor: Annotated[ActorContext | None, Depends(get_current_actor_optional)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> ActorContext:
    """Return the acting user; 401 if absent or the token is bad, 403 if inactive."""
    if actor is None:
        if credentials is not None:
            raise AuthenticationException("Invalid or expired token")
        raise MissingActorException()
    if not actor.is_active:
        raise AuthorizationException(message="User account is inactive")
    return actor


def require_roles(*roles: Role):
    """Dependency factory: require an active actor whose role is one of roles."""
    allowed = frozenset(roles)

    async def _require(
        actor: Annotated[ActorContext, Depends(get_current_actor)],
    ) -> ActorContext:
        if actor.role not in allowed:
            raise AuthorizationException(
                message=f"Role {actor.role.value} may not access this resource"
            )
        return actor

    return _require
