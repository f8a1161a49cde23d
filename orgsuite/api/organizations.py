"""
Organization management API routes.

Provides CRUD operations for organizations (tenants).
"""

from datetime import date
from typing import Dict, List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import column_values, reject_nulls
from orgsuite.database import get_db
from orgsuite.middleware.auth import (
    get_current_active_user,
    require_admin,
    require_org_access,
    require_super_admin,
)
from orgsuite.models import Organization, User
from orgsuite.permissions import normalize_modules
from orgsuite.services.activity import log_activity

router = APIRouter(prefix="/api/v1/organizations", tags=["organizations"])

ContractStatus = Literal["active", "on_trial", "expired", "cancelled", "pending"]

# Fields only a super admin may change
PLATFORM_FIELDS = {
    "modules",
    "plan_type",
    "subscription_ends",
    "contract_start_date",
    "contract_end_date",
    "contract_status",
    "is_active",
}


# Pydantic schemas
class ThemeColors(BaseModel):
    primary: str
    background: str
    accent: str


class LandingPage(BaseModel):
    title: str
    description: str


class OrganizationCreate(BaseModel):
    """Schema for creating a new organization."""

    name: str = Field(..., min_length=2, max_length=255)
    tax_id: Optional[str] = Field(None, max_length=50)
    plan_type: Optional[str] = Field(None, max_length=50)
    subscription_ends: date
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    contract_status: ContractStatus = "pending"
    modules: Dict[str, bool] = Field(default_factory=dict)
    theme_colors: Optional[ThemeColors] = None
    landing_page: Optional[LandingPage] = None

    @field_validator("modules")
    @classmethod
    def check_modules(cls, value):
        return normalize_modules(value)


class OrganizationUpdate(BaseModel):
    """Schema for updating an organization."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    tax_id: Optional[str] = Field(None, max_length=50)
    plan_type: Optional[str] = Field(None, max_length=50)
    subscription_ends: Optional[date] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    contract_status: Optional[ContractStatus] = None
    modules: Optional[Dict[str, bool]] = None
    theme_colors: Optional[ThemeColors] = None
    landing_page: Optional[LandingPage] = None
    is_active: Optional[bool] = None

    @field_validator("modules")
    @classmethod
    def check_modules(cls, value):
        return normalize_modules(value) if value is not None else None


class OrganizationResponse(BaseModel):
    """Schema for organization response."""

    id: UUID
    name: str
    tax_id: Optional[str]
    plan_type: Optional[str]
    subscription_ends: date
    contract_start_date: Optional[date]
    contract_end_date: Optional[date]
    contract_status: str
    is_active: bool
    modules: Dict[str, bool]
    theme_colors: Optional[ThemeColors]
    landing_page: Optional[LandingPage]

    class Config:
        from_attributes = True


async def _get_organization(db: AsyncSession, organization_id: UUID) -> Organization:
    result = await db.execute(
        select(Organization).where(
            Organization.id == organization_id, Organization.deleted_at.is_(None)
        )
    )
    organization = result.scalar_one_or_none()

    if not organization:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Organization {organization_id} not found",
        )
    return organization


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    """
    Create a new tenant organization.

    Modules not listed are created disabled. Super admin only.
    """
    db_org = Organization(**column_values(Organization, organization), is_active=True)
    db.add(db_org)
    await db.flush()

    log_activity(
        db, current_user, "CREATE", "organizations", db_org.id,
        changes={"name": db_org.name}, organization_id=db_org.id,
    )
    await db.commit()
    await db.refresh(db_org)

    return db_org


@router.get("", response_model=List[OrganizationResponse])
async def list_organizations(
    skip: int = 0,
    limit: int = 100,
    is_active: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    List organizations.

    Super admins see every tenant; everyone else only their own.
    """
    query = select(Organization).where(Organization.deleted_at.is_(None))

    if not current_user.is_super_admin:
        query = query.where(Organization.id == current_user.organization_id)

    if is_active is not None:
        query = query.where(Organization.is_active == is_active)

    query = query.order_by(Organization.name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_org_access),
):
    """Get organization by ID. The caller must belong to it."""
    return await _get_organization(db, organization_id)


@router.put("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: UUID,
    organization_update: OrganizationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Update organization.

    An organization admin may edit the profile and branding of their own
    organization. Modules, subscription and contract are reserved to
    super admins.
    """
    if not current_user.is_super_admin and current_user.organization_id != organization_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: You do not belong to this organization",
        )

    organization = await _get_organization(db, organization_id)

    update_data = organization_update.model_dump(exclude_unset=True)
    reserved = PLATFORM_FIELDS & set(update_data)
    if reserved and not current_user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only a super admin can change: {', '.join(sorted(reserved))}",
        )

    values = reject_nulls(Organization, column_values(Organization, organization_update, exclude_unset=True))
    for field, value in values.items():
        setattr(organization, field, value)

    log_activity(
        db, current_user, "UPDATE", "organizations", organization.id,
        changes=organization_update.model_dump(exclude_unset=True, mode="json"),
        organization_id=organization.id,
    )
    await db.commit()
    await db.refresh(organization)

    return organization


@router.delete("/{organization_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_organization(
    organization_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_super_admin),
):
    """
    Delete organization (soft delete).

    Its users can no longer reach any module. Super admin only.
    """
    organization = await _get_organization(db, organization_id)
    organization.soft_delete()

    log_activity(
        db, current_user, "DELETE", "organizations", organization.id,
        changes={"name": organization.name}, organization_id=organization.id,
    )
    await db.commit()
