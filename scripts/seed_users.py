"""Seed one user per role and print a bearer token for each (development only).

Usage:
    python -m scripts.seed_users
Existing usernames are left untouched; their tokens are printed again.
"""

import asyncio
import sys

import officeflow.infrastructure.persistence.database as database
from officeflow.core.config import get_settings
from officeflow.domain.enums import Role
from officeflow.infrastructure.persistence.repositories import UserRepository
from officeflow.infrastructure.security import create_actor_token

SEED_USERS: tuple[tuple[str, str, Role], ...] = (
    ("admin", "System Admin", Role.ADMIN),
    ("leader", "Team Leader", Role.TEAM_LEADER),
    ("deputy", "Deputy Leader", Role.DEPUTY),
    ("secretary", "Office Secretary", Role.SECRETARY),
    ("officer", "Duty Officer", Role.OFFICER),
)


async def main() -> None:
    """Create missing seed users, then print username, id, role and token."""
    get_settings()
    await database.create_all()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            user_repo = UserRepository(session)
            users = []
            for username, name, role in SEED_USERS:
                user = await user_repo.get_by_username(username)
                if user is None:
                    user = await user_repo.create_user(username, name, role)
                    print(f"Created user: {user.id} ({username})")
                users.append(user)

    for user in users:
        token = create_actor_token(user.id, user.role, user.name, user.is_active)
        print(f"{user.username}\t{user.id}\t{user.role.value}\t{token}")
    await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
