"""Actor context middleware.

Resolves the acting user from the Bearer token before the route runs and
publishes it twice: in scope["state"]["actor"] (read by the audit capture
middleware after the response) and in the request contextvar (read by
dependencies and services). A missing or invalid token leaves the request
anonymous; endpoints that need an actor reject it themselves.
"""

from __future__ import annotations

from typing import Callable

from officeflow.infrastructure.security.jwt import actor_from_token
from officeflow.shared.context import ActorContext, reset_current_actor, set_current_actor
from officeflow.shared.request_audit import client_ip_from_scope, get_header
from officeflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def actor_from_scope(scope: dict) -> ActorContext | None:
    """Return the actor for this request with its client identity, or None."""
    auth = get_header(scope, "Authorization")
    if not auth or not auth.startswith("Bearer "):
        return None
    try:
        actor = actor_from_token(auth[7:].strip())
    except ValueError as e:
        logger.debug("Ignoring invalid bearer token: %s", e)
        return None
    state = scope.get("state", {})
    return actor.with_client(
        client_ip_from_scope(scope),
        get_header(scope, "User-Agent"),
        state.get("request_id"),
    )


def ActorContextMiddleware(app: Callable) -> Callable:
    """Set the current actor from the JWT for the duration of the request. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        actor = actor_from_scope(scope)
        scope.setdefault("state", {})["actor"] = actor
        token = set_current_actor(actor)
        try:
            await app(scope, receive, send)
        finally:
            reset_current_actor(token)

    return asgi_app
