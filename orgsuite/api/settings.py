"""
Organization system settings API routes.

Sales tax rate, accounting defaults used by automatic journal entries,
CRM acquisition channels and the default email footer.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import reject_nulls
from orgsuite.database import get_db
from orgsuite.middleware.auth import get_active_organization, get_current_active_user
from orgsuite.models import Account, OrganizationSettings, User
from orgsuite.permissions import Role
from orgsuite.services.activity import log_activity
from orgsuite.services.records import get_record
from orgsuite.services.settings import get_organization_settings

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])

ACCOUNT_FIELDS = (
    "default_cash_account_id",
    "default_sales_revenue_account_id",
    "default_tax_payable_account_id",
    "default_inventory_account_id",
    "default_cogs_account_id",
)

class SettingsUpdate(BaseModel):
    """Schema for updating settings; only the fields sent change."""

    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    accounting_sector: Optional[str] = Field(None, max_length=20)
    default_cash_account_id: Optional[UUID] = None
    default_sales_revenue_account_id: Optional[UUID] = None
    default_tax_payable_account_id: Optional[UUID] = None
    default_inventory_account_id: Optional[UUID] = None
    default_cogs_account_id: Optional[UUID] = None
    acquisition_channels: Optional[List[str]] = None
    default_email_footer: Optional[str] = None


class SettingsResponse(BaseModel):
    organization_id: UUID
    tax_rate: float
    accounting_sector: Optional[str]
    default_cash_account_id: Optional[UUID]
    default_sales_revenue_account_id: Optional[UUID]
    default_tax_payable_account_id: Optional[UUID]
    default_inventory_account_id: Optional[UUID]
    default_cogs_account_id: Optional[UUID]
    acquisition_channels: List[str]
    default_email_footer: Optional[str]

    class Config:
        from_attributes = True


@router.get("", response_model=SettingsResponse)
async def get_settings_endpoint(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """Settings of the caller's organization (created with defaults if missing)."""
    organization = await get_active_organization(db, current_user)
    org_settings = await get_organization_settings(db, organization.id)
    await db.commit()
    return org_settings


@router.put("", response_model=SettingsResponse)
async def update_settings(
    update: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    """
    Update the caller's organization settings.

    Requires the admin role. Default accounts must belong to the organization.
    """
    if current_user.role not in (Role.ADMIN.value, Role.SUPER_ADMIN.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organization admin access required",
        )

    organization = await get_active_organization(db, current_user)
    org_settings = await get_organization_settings(db, organization.id)

    data = reject_nulls(OrganizationSettings, update.model_dump(exclude_unset=True))
    for field in ACCOUNT_FIELDS:
        if data.get(field) is not None:
            await get_record(db, Account, organization.id, data[field], "Account")

    for field, value in data.items():
        setattr(org_settings, field, value)

    log_activity(
        db, current_user, "UPDATE", "settings", org_settings.id,
        changes=update.model_dump(mode="json", exclude_unset=True),
    )
    await db.commit()
    await db.refresh(org_settings)
    return org_settings
