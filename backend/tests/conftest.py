from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from hr_vacations.db import get_session
from hr_vacations.main import app
from hr_vacations.models import Employee, SQLModel
from hr_vacations.schemas.auth import AuthContext

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = "sqlite+aiosqlite://"

ADMIN_USER_ID = uuid.uuid4()
EMPLOYEE_USER_ID = uuid.uuid4()
OTHER_USER_ID = uuid.uuid4()

ADMIN_HEADERS = {"X-User-Id": str(ADMIN_USER_ID), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_USER_ID), "X-Role": "employee"}
OTHER_HEADERS = {"X-User-Id": str(OTHER_USER_ID), "X-Role": "employee"}

ADMIN_AUTH = AuthContext(user_id=ADMIN_USER_ID, role="admin")
EMPLOYEE_AUTH = AuthContext(user_id=EMPLOYEE_USER_ID, role="employee")
OTHER_AUTH = AuthContext(user_id=OTHER_USER_ID, role="employee")


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory database per test, schema created from the models."""
    _engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def _add_employee(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    first_name: str,
    last_name: str,
    department: str = "Engineering",
) -> uuid.UUID:
    employee = Employee(
        user_id=user_id,
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{last_name.lower()}@example.com",
        department=department,
    )
    session.add(employee)
    await session.commit()
    return employee.id


@pytest.fixture
async def admin_employee_id(db_session: AsyncSession) -> uuid.UUID:
    return await _add_employee(db_session, ADMIN_USER_ID, "Ada", "Admin", department="IT")


@pytest.fixture
async def employee_id(db_session: AsyncSession) -> uuid.UUID:
    return await _add_employee(db_session, EMPLOYEE_USER_ID, "Evan", "Employee")


@pytest.fixture
async def other_employee_id(db_session: AsyncSession) -> uuid.UUID:
    return await _add_employee(db_session, OTHER_USER_ID, "Olga", "Other", department="Sales")
