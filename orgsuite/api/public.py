"""
Public API routes.

Unauthenticated reads for an organization's landing page. Only branding is
exposed: name, theme colors and landing page text.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.organizations import LandingPage, ThemeColors
from orgsuite.database import get_db
from orgsuite.models import Organization
from orgsuite.permissions import Module

router = APIRouter(prefix="/api/v1/public", tags=["public"])


class PublicOrganizationResponse(BaseModel):
    """Branding shown on an organization's public page."""

    id: UUID
    name: str
    theme_colors: Optional[ThemeColors]
    landing_page: Optional[LandingPage]

    class Config:
        from_attributes = True


@router.get("/organizations/{organization_id}", response_model=PublicOrganizationResponse)
async def get_public_organization(organization_id: UUID, db: AsyncSession = Depends(get_db)):
    """
    Landing page data of an organization.

    Deleted or inactive organizations, and those with the landing page
    module turned off, answer 404 like unknown ids.
    """
    result = await db.execute(
        select(Organization).where(
            Organization.id == organization_id,
            Organization.deleted_at.is_(None),
            Organization.is_active.is_(True),
        )
    )
    organization = result.scalar_one_or_none()

    if organization is None or not organization.has_module(Module.LANDING_PAGE.value):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Organization {organization_id} not found",
        )

    return organization
