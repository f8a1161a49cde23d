"""
Seed data script for local development.

Creates a demo organization with every module enabled, its admin, an
employee and a dental patient. Running it twice changes nothing.

Usage:
    python -m orgsuite.scripts.seed_data
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.database import AsyncSessionLocal, init_db
from orgsuite.models import Employee, Organization, Patient, User
from orgsuite.permissions import Module, Role, normalize_modules
from orgsuite.security import hash_password
from orgsuite.services.accounting import seed_chart_of_accounts
from orgsuite.services.settings import get_organization_settings

DEMO_ORGANIZATION = "Demo Institute"
DEMO_ADMIN_EMAIL = "admin@demo-institute.edu"
DEMO_ADMIN_PASSWORD = "ChangeMe123!"


async def seed(db: AsyncSession) -> bool:
    """
    Create the demo data.

    Returns:
        False if the demo organization already exists
    """
    result = await db.execute(select(Organization).where(Organization.name == DEMO_ORGANIZATION))
    if result.scalar_one_or_none():
        return False

    organization = Organization(
        name=DEMO_ORGANIZATION,
        tax_id="900123456-7",
        plan_type="premium",
        subscription_ends=date.today() + timedelta(days=365),
        contract_start_date=date.today(),
        contract_status="active",
        is_active=True,
        modules=normalize_modules({module.value: True for module in Module}),
        theme_colors={"primary": "#1e40af", "background": "#f8fafc", "accent": "#f59e0b"},
        landing_page={"title": DEMO_ORGANIZATION, "description": "School, clinic and store in one place."},
    )
    db.add(organization)
    await db.flush()

    db.add_all([
        User(
            organization_id=organization.id,
            email=DEMO_ADMIN_EMAIL,
            name="Demo Admin",
            hashed_password=hash_password(DEMO_ADMIN_PASSWORD),
            role=Role.ADMIN.value,
            status="active",
            force_password_change=True,
        ),
        Employee(
            organization_id=organization.id,
            name="Laura Gómez",
            email="laura.gomez@demo-institute.edu",
            position="Receptionist",
            salary=1800000.0,
            contracted_hours=160,
            eps="Sura",
            arl="Positiva",
        ),
        Patient(
            organization_id=organization.id,
            name="Carlos Pérez",
            identification_number="1020304050",
            age=34,
            gender="male",
            phone="3001234567",
            odontogram_state={"16": {"status": "present", "conditions": ["caries"]}},
            follow_ups=[],
        ),
    ])

    await seed_chart_of_accounts(db, organization.id)
    await get_organization_settings(db, organization.id)
    await db.commit()
    return True


async def seed_database():
    """Create tables and seed data for development."""

    print("Seeding database with sample data...")
    await init_db()

    async with AsyncSessionLocal() as db:
        if not await seed(db):
            print("Demo organization already exists. Skipping seed.")
            return

    print(f"  Created {DEMO_ORGANIZATION}")
    print(f"  Admin login: {DEMO_ADMIN_EMAIL} / {DEMO_ADMIN_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(seed_database())
