"""
Pytest configuration and fixtures for OrgSuite tests.

Provides fixtures for:
- Database session
- Test client
- Test organizations (active, second tenant, expired subscription)
- Test users per role and their bearer headers
"""

import os
from datetime import date, timedelta
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from orgsuite.database import get_db
from orgsuite.main import app
from orgsuite.models import Organization, User
from orgsuite.models.base import Base
from orgsuite.permissions import Role, normalize_modules
from orgsuite.security import create_access_token, create_refresh_token, hash_password

# Test database URL (use file-based SQLite for tests to ensure table persistence)
TEST_DB_FILE = "test_db.sqlite"
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_FILE}"

ALL_MODULES_ON = normalize_modules(
    {
        "hr": True,
        "academics": True,
        "students": True,
        "finance": True,
        "inventory": True,
        "sales": True,
        "reports": True,
        "landing_page": True,
        "communications": True,
        "crm": True,
        "odontology": True,
    }
)


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)

    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()

    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session


async def _add(db: AsyncSession, record):
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


@pytest_asyncio.fixture
async def test_organization(test_db: AsyncSession) -> Organization:
    """Active organization with every module enabled."""
    return await _add(
        test_db,
        Organization(
            name="Test Organization",
            tax_id="900111222-3",
            plan_type="premium",
            subscription_ends=date.today() + timedelta(days=365),
            contract_status="active",
            is_active=True,
            modules=dict(ALL_MODULES_ON),
        ),
    )


@pytest_asyncio.fixture
async def other_organization(test_db: AsyncSession) -> Organization:
    """Second tenant, used to check isolation."""
    return await _add(
        test_db,
        Organization(
            name="Other Organization",
            subscription_ends=date.today() + timedelta(days=365),
            contract_status="active",
            is_active=True,
            modules=dict(ALL_MODULES_ON),
        ),
    )


@pytest_asyncio.fixture
async def expired_organization(test_db: AsyncSession) -> Organization:
    """Organization whose subscription ended yesterday."""
    return await _add(
        test_db,
        Organization(
            name="Expired Organization",
            subscription_ends=date.today() - timedelta(days=1),
            contract_status="expired",
            is_active=True,
            modules=dict(ALL_MODULES_ON),
        ),
    )


def _user(organization, email: str, name: str, role: Role, password: str, status: str = "active") -> User:
    return User(
        organization_id=organization.id if organization else None,
        email=email,
        name=name,
        hashed_password=hash_password(password),
        role=role.value,
        status=status,
    )


@pytest_asyncio.fixture
async def test_user_super_admin(test_db: AsyncSession) -> User:
    """Platform operator without an organization."""
    return await _add(
        test_db, _user(None, "root@orgsuite.com", "Root Operator", Role.SUPER_ADMIN, "root12345")
    )


@pytest_asyncio.fixture
async def test_user_admin(test_db: AsyncSession, test_organization: Organization) -> User:
    """Create test admin user."""
    return await _add(
        test_db, _user(test_organization, "admin@testorg.com", "Admin User", Role.ADMIN, "admin123")
    )


@pytest_asyncio.fixture
async def test_user_hr(test_db: AsyncSession, test_organization: Organization) -> User:
    return await _add(
        test_db, _user(test_organization, "hr@testorg.com", "Helen Ruiz", Role.HR, "hr123456")
    )


@pytest_asyncio.fixture
async def test_user_finance(test_db: AsyncSession, test_organization: Organization) -> User:
    return await _add(
        test_db,
        _user(test_organization, "finance@testorg.com", "Felipe Nunez", Role.FINANCE, "finance123"),
    )


@pytest_asyncio.fixture
async def test_user_academic(test_db: AsyncSession, test_organization: Organization) -> User:
    return await _add(
        test_db,
        _user(test_organization, "teacher@testorg.com", "Ana Torres", Role.ACADEMIC, "teacher123"),
    )


@pytest_asyncio.fixture
async def test_user_student(test_db: AsyncSession, test_organization: Organization) -> User:
    return await _add(
        test_db,
        _user(test_organization, "student@testorg.com", "Sam Student", Role.STUDENT, "student123"),
    )


@pytest_asyncio.fixture
async def test_user_inactive(test_db: AsyncSession, test_organization: Organization) -> User:
    """Create inactive test user."""
    return await _add(
        test_db,
        _user(
            test_organization,
            "inactive@testorg.com",
            "Inactive User",
            Role.ADMIN,
            "inactive123",
            status="inactive",
        ),
    )


@pytest_asyncio.fixture
async def test_user_pending(test_db: AsyncSession) -> User:
    """Self-registered account waiting for approval."""
    return await _add(
        test_db,
        _user(None, "pending@newcomer.com", "Pat Pending", Role.PENDING, "pending123", status="pending"),
    )


@pytest_asyncio.fixture
async def other_admin(test_db: AsyncSession, other_organization: Organization) -> User:
    """Admin of the second tenant."""
    return await _add(
        test_db,
        _user(other_organization, "admin@otherorg.com", "Other Admin", Role.ADMIN, "other123"),
    )


@pytest_asyncio.fixture
async def expired_admin(test_db: AsyncSession, expired_organization: Organization) -> User:
    return await _add(
        test_db,
        _user(expired_organization, "admin@expired.com", "Late Payer", Role.ADMIN, "expired123"),
    )


def bearer(user: User) -> dict:
    """Authorization header with a fresh access token for ``user``."""
    token = create_access_token(
        user_id=user.id,
        organization_id=user.organization_id,
        email=user.email,
        role=user.role,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    """Factory fixture: ``auth_headers(user)`` returns bearer headers."""
    return bearer


@pytest_asyncio.fixture
async def admin_headers(test_user_admin: User) -> dict:
    return bearer(test_user_admin)


@pytest_asyncio.fixture
async def super_admin_headers(test_user_super_admin: User) -> dict:
    return bearer(test_user_super_admin)


@pytest_asyncio.fixture
async def other_admin_headers(other_admin: User) -> dict:
    return bearer(other_admin)


@pytest_asyncio.fixture
async def admin_refresh_token(test_user_admin: User) -> str:
    """Create refresh token for admin user."""
    return create_refresh_token(user_id=test_user_admin.id)


@pytest_asyncio.fixture
async def client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database session override."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
