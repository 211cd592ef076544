"""Tests for actor tokens (python-jose)."""

from datetime import timedelta

import pytest

from officeflow.domain.enums import Role
from officeflow.infrastructure.security import (
    actor_from_token,
    create_access_token,
    create_actor_token,
    verify_token,
)


def test_actor_token_round_trip() -> None:
    token = create_actor_token(12, Role.DEPUTY, "Deputy Le")
    actor = actor_from_token(token)
    assert actor.user_id == 12
    assert actor.role is Role.DEPUTY
    assert actor.name == "Deputy Le"
    assert actor.is_active is True
    assert actor.ip_address is None


def test_inactive_flag_is_carried() -> None:
    assert actor_from_token(create_actor_token(3, Role.OFFICER, is_active=False)).is_active is False


def test_expired_token_rejected() -> None:
    token = create_actor_token(1, Role.ADMIN, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        verify_token(token)


def test_garbage_token_rejected() -> None:
    with pytest.raises(ValueError):
        actor_from_token("not-a-jwt")


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "abc", "role": "Admin"},
        {"sub": "0", "role": "Admin"},
        {"sub": "4", "role": "Manager"},
        {"sub": "4"},
    ],
)
def test_bad_claims_rejected(claims: dict) -> None:
    with pytest.raises(ValueError):
        actor_from_token(create_access_token(claims))
