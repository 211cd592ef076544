"""Pytest configuration and fixtures for officeflow.

Runs every test against a fresh in-memory SQLite database: the schema is
created before each test and the engine is disposed after it, which drops
the database. Environment is set before importing officeflow so Settings
validation sees it.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"

from collections.abc import AsyncIterator, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

import officeflow.infrastructure.persistence.database as database  # noqa: E402
from officeflow.application.dtos.user import UserResult  # noqa: E402
from officeflow.core.config import get_settings  # noqa: E402
from officeflow.domain.enums import Role  # noqa: E402
from officeflow.infrastructure.persistence.repositories import (  # noqa: E402
    DocumentRepository,
    UserRepository,
)
from officeflow.infrastructure.security import create_actor_token  # noqa: E402

get_settings.cache_clear()

from officeflow.main import app  # noqa: E402


@pytest.fixture(autouse=True)
async def _schema() -> AsyncIterator[None]:
    """Fresh schema per test; disposing the engine discards the in-memory database."""
    await database.create_all()
    yield
    await database.dispose_engine()


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Session for repository tests. Commit explicitly when a later request must see the data."""
    database._ensure_engine()
    assert database.AsyncSessionLocal is not None
    async with database.AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def users() -> dict[str, UserResult]:
    """One active user per role plus a second officer, keyed by username."""
    database._ensure_engine()
    assert database.AsyncSessionLocal is not None
    seed = (
        ("admin", "Admin User", Role.ADMIN),
        ("leader", "Lead Tran", Role.TEAM_LEADER),
        ("deputy", "Deputy Le", Role.DEPUTY),
        ("secretary", "Sec Pham", Role.SECRETARY),
        ("officer", "Officer Ngo", Role.OFFICER),
        ("officer2", "Officer Vo", Role.OFFICER),
    )
    created: dict[str, UserResult] = {}
    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            repo = UserRepository(session)
            for username, name, role in seed:
                created[username] = await repo.create_user(username, name, role)
    return created


@pytest.fixture
async def incoming_document_id(users: dict[str, UserResult]) -> int:
    database._ensure_engine()
    assert database.AsyncSessionLocal is not None
    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            return await DocumentRepository(session).create_incoming(
                "IN-2024-001", "Budget request", users["secretary"].id
            )


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Factory: Authorization header for a user (optionally overriding is_active)."""

    def _headers(user: UserResult, is_active: bool | None = None) -> dict[str, str]:
        token = create_actor_token(
            user.id,
            user.role,
            user.name,
            user.is_active if is_active is None else is_active,
        )
        return {"Authorization": f"Bearer {token}", "User-Agent": "pytest-client"}

    return _headers
