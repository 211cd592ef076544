"""JWT token creation and verification for authentication.

Uses officeflow.core.config for secret and algorithm. Tokens carry the
actor identity the audit trail needs: sub (user id), role, name, is_active.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from officeflow.core.config import get_settings
from officeflow.domain.enums import Role
from officeflow.domain.exceptions import ValidationException
from officeflow.shared.context import ActorContext


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with the given claims.

    Args:
        data: Claims to encode (sub, role, name, is_active).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta is not None:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode["exp"] = expire
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def create_actor_token(
    user_id: int,
    role: Role,
    name: str = "",
    is_active: bool = True,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a token for one user; sub is the string form of the integer id."""
    return create_access_token(
        {"sub": str(user_id), "role": role.value, "name": name, "is_active": is_active},
        expires_delta=expires_delta,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub. Raises ValueError if the token is
    invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def actor_from_token(token: str) -> ActorContext:
    """Decode a token into an ActorContext. Raises ValueError on any bad claim."""
    payload = verify_token(token)
    sub = str(payload["sub"])
    if not sub.isdigit() or int(sub) <= 0:
        raise ValueError("Token subject is not a user id")
    try:
        role = Role.parse(payload.get("role"), field="role")
    except ValidationException as e:
        raise ValueError(e.message) from e
    return ActorContext(
        user_id=int(sub),
        role=role,
        name=str(payload.get("name") or ""),
        is_active=bool(payload.get("is_active", True)),
    )
