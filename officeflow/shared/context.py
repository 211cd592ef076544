"""Request context management using contextvars.

Provides async-safe storage for request-scoped data: the current actor
(set by ActorContextMiddleware after the bearer token is verified, read by
dependencies and services that need "who is acting") and the request id
(set by RequestIDMiddleware, read by the logging filter).

Usage:
    set_current_actor(ActorContext(user_id=7, role=Role.OFFICER, name="Lan"))
    actor = get_current_actor()
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

from officeflow.domain.enums import Role


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the authenticated actor and its client identity."""

    user_id: int
    role: Role
    name: str = ""
    is_active: bool = True
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None

    def with_client(
        self,
        ip_address: str | None,
        user_agent: str | None,
        request_id: str | None = None,
    ) -> "ActorContext":
        """Return a copy carrying the given client identity."""
        return replace(
            self, ip_address=ip_address, user_agent=user_agent, request_id=request_id
        )


_current_actor: ContextVar[ActorContext | None] = ContextVar(
    "current_actor", default=None
)


def set_current_actor(actor: ActorContext | None) -> Token:
    """Set the current actor for this request; returns a token for reset_current_actor."""
    return _current_actor.set(actor)


def reset_current_actor(token: Token) -> None:
    """Restore the actor that was current before the matching set_current_actor."""
    _current_actor.reset(token)


def get_current_actor() -> ActorContext | None:
    """Return the current actor, or None if the request is anonymous."""
    return _current_actor.get()


_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> Token:
    """Set the id of the request being served; returns a token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


def get_request_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return _request_id.get()
