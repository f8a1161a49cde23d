"""
Academic settings rules: a single active period and grading weights that
never exceed 100% per organization.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.exceptions import BusinessRuleError
from orgsuite.models import AcademicPeriod, GradingActivity

logger = logging.getLogger(__name__)

MAX_TOTAL_WEIGHT = 100.0


async def activate_period(db: AsyncSession, period: AcademicPeriod) -> AcademicPeriod:
    """Make ``period`` the only active academic period of its organization."""
    result = await db.execute(
        select(AcademicPeriod).where(
            AcademicPeriod.organization_id == period.organization_id,
            AcademicPeriod.is_active.is_(True),
        )
    )
    for other in result.scalars().all():
        if other.id != period.id:
            other.is_active = False
    period.is_active = True
    await db.flush()
    logger.info("Academic period %s activated (org %s)", period.name, period.organization_id)
    return period


async def ensure_grading_weight(
    db: AsyncSession,
    organization_id: UUID,
    percentage: float,
    exclude_id: Optional[UUID] = None,
) -> None:
    """
    Check that adding/updating an activity keeps the weights within 100%.

    Raises:
        BusinessRuleError: If the organization total would exceed 100
    """
    query = select(func.coalesce(func.sum(GradingActivity.percentage), 0.0)).where(
        GradingActivity.organization_id == organization_id
    )
    if exclude_id is not None:
        query = query.where(GradingActivity.id != exclude_id)
    current = (await db.execute(query)).scalar_one()
    if current + percentage > MAX_TOTAL_WEIGHT:
        raise BusinessRuleError(
            f"Grading activities would add up to {current + percentage:g}%; the maximum is 100%"
        )
