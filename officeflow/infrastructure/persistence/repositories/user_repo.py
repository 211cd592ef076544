"""User repository. Read side implements IUserLookup; create_user serves seeding scripts and tests."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.dtos.user import UserResult
from officeflow.domain.enums import Role
from officeflow.infrastructure.persistence.models.user import User
from officeflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(u: User) -> UserResult:
    """Map User ORM to UserResult DTO."""
    return UserResult(
        id=u.id,
        name=u.name,
        username=u.username,
        role=Role.parse(u.role),
        is_active=u.is_active,
    )


class UserRepository(BaseRepository[User]):
    """User directory access."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_user(self, user_id: int) -> UserResult | None:
        row = await self.get_by_id(user_id)
        return _to_result(row) if row else None

    async def find_active_by_role(self, role: Role) -> UserResult | None:
        stmt = (
            select(User)
            .where(User.role == role.value, User.is_active.is_(True))
            .order_by(User.id.asc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def get_by_username(self, username: str) -> UserResult | None:
        result = await self.db.execute(select(User).where(User.username == username))
        row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def create_user(
        self, username: str, name: str, role: Role, *, is_active: bool = True
    ) -> UserResult:
        row = await self.create(
            User(username=username, name=name, role=role.value, is_active=is_active)
        )
        return _to_result(row)
