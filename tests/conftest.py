"""Pytest fixtures for HR admin engine tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hr_admin.api.app import create_app
from hr_admin.api.dependencies import get_db_session
from hr_admin.database import make_session_factory
from hr_admin.models import Base, Department, User, UserRole
from hr_admin.services.guards import Actor
from hr_admin.services.registry import EntityKind
from hr_admin.services.resource_handler import ResourceHandler

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service-level tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def _add_user(session: AsyncSession, name: str, email: str, role: UserRole) -> User:
    user = User(name=name, email=email, role=role.value)
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def admin(session: AsyncSession) -> User:
    return await _add_user(session, "Ada Admin", "ada@acme.io", UserRole.ADMIN)


@pytest_asyncio.fixture
async def hr_user(session: AsyncSession) -> User:
    return await _add_user(session, "Hana Hr", "hana@acme.io", UserRole.HR)


@pytest_asyncio.fixture
async def other_hr(session: AsyncSession) -> User:
    return await _add_user(session, "Omar Hr", "omar@acme.io", UserRole.HR)


@pytest_asyncio.fixture
async def employee_user(session: AsyncSession) -> User:
    return await _add_user(session, "Eve Employee", "eve@acme.io", UserRole.EMPLOYEE)


@pytest.fixture
def admin_actor(admin: User) -> Actor:
    return Actor(id=admin.id, role=admin.role)


@pytest.fixture
def hr_actor(hr_user: User) -> Actor:
    return Actor(id=hr_user.id, role=hr_user.role)


async def _add_department(session: AsyncSession, name: str) -> Department:
    department = Department(name=name, description=f"The {name} team")
    session.add(department)
    await session.commit()
    return department


@pytest_asyncio.fixture
async def sales(session: AsyncSession) -> Department:
    return await _add_department(session, "Sales")


@pytest_asyncio.fixture
async def engineering(session: AsyncSession) -> Department:
    return await _add_department(session, "Engineering")


ProfileFactory = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def make_profile(session: AsyncSession, admin_actor: Actor) -> ProfileFactory:
    """Create employee profiles through the audited handler as the admin."""

    async def factory(
        user_id: UUID,
        department_id: UUID,
        salary: Decimal = Decimal("50000.00"),
    ) -> dict[str, Any]:
        result = await ResourceHandler(session, EntityKind.EMPLOYEE_PROFILE).create(
            {
                "user_id": user_id,
                "department_id": department_id,
                "salary": salary,
                "phone": "+1 555 123 4567",
                "address": "1 Market Street",
                "date_of_birth": date(1990, 4, 12),
            },
            admin_actor.id,
        )
        assert result.warnings == []
        return result.document

    return factory


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the test database."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def as_actor(user: User) -> dict[str, str]:
    """Request headers identifying the acting user."""
    return {"X-Actor-ID": str(user.id)}
