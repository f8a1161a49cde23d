"""Per-organization system settings, created on first access."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.config.settings import get_settings
from orgsuite.models import OrganizationSettings


async def get_organization_settings(db: AsyncSession, organization_id: UUID) -> OrganizationSettings:
    result = await db.execute(
        select(OrganizationSettings).where(OrganizationSettings.organization_id == organization_id)
    )
    org_settings = result.scalar_one_or_none()
    if org_settings is None:
        org_settings = OrganizationSettings(
            organization_id=organization_id,
            tax_rate=get_settings().default_tax_rate,
            acquisition_channels=[],
        )
        db.add(org_settings)
        await db.flush()
    return org_settings
