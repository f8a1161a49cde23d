"""
Unit tests for the development seed script.
"""

import pytest
from sqlalchemy import func, select

from orgsuite.models import Account, Organization, User
from orgsuite.scripts.seed_data import DEMO_ADMIN_EMAIL, DEMO_ADMIN_PASSWORD, DEMO_ORGANIZATION, seed
from orgsuite.security import verify_password

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_seed_is_idempotent(test_db):
    assert await seed(test_db) is True
    assert await seed(test_db) is False

    result = await test_db.execute(select(Organization).where(Organization.name == DEMO_ORGANIZATION))
    organization = result.scalar_one()
    assert all(organization.modules.values())

    result = await test_db.execute(select(User).where(User.email == DEMO_ADMIN_EMAIL))
    admin = result.scalar_one()
    assert admin.role == "admin"
    assert admin.force_password_change is True
    assert verify_password(DEMO_ADMIN_PASSWORD, admin.hashed_password)

    count = await test_db.scalar(
        select(func.count(Account.id)).where(Account.organization_id == organization.id)
    )
    assert count == 35
