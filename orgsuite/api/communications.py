"""
Communications API routes.

Provides CRUD for message templates and campaigns, and campaign sending.
"""

import datetime as dt
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.exceptions import BusinessRuleError, ConflictError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Campaign, Template
from orgsuite.permissions import Module
from orgsuite.services.activity import log_activity
from orgsuite.services.records import get_record

TemplateType = Literal["whatsapp", "email"]
Audience = Literal["all", "prospects", "active"]
CampaignStatus = Literal["draft", "scheduled"]


# Templates
class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=255)
    type: TemplateType
    subject: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=10)


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    type: Optional[TemplateType] = None
    subject: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, min_length=10)


class TemplateResponse(TenantRecordResponse):
    name: str
    type: str
    subject: Optional[str]
    content: str


# Campaigns
class CampaignCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=255)
    template_id: UUID
    target_audience: Audience
    status: CampaignStatus = "draft"
    scheduled_at: Optional[dt.datetime] = None

    @model_validator(mode="after")
    def check_schedule(self):
        if self.status == "scheduled" and self.scheduled_at is None:
            raise ValueError("scheduled_at is required for scheduled campaigns")
        return self


class CampaignUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    template_id: Optional[UUID] = None
    target_audience: Optional[Audience] = None
    status: Optional[CampaignStatus] = None
    scheduled_at: Optional[dt.datetime] = None


class CampaignResponse(TenantRecordResponse):
    name: str
    template_id: UUID
    target_audience: str
    status: str
    scheduled_at: Optional[dt.datetime]
    sent_at: Optional[dt.datetime]


async def campaign_before_create(db, ctx, data):
    await get_record(db, Template, ctx.require_organization(), data["template_id"], "Template")
    return data


async def campaign_before_update(db, ctx, campaign, data):
    if campaign.status == "sent":
        raise ConflictError("A sent campaign cannot be edited")
    if data.get("template_id") is not None:
        await get_record(db, Template, campaign.organization_id, data["template_id"], "Template")
    status_value = data.get("status") or campaign.status
    scheduled_at = data["scheduled_at"] if "scheduled_at" in data else campaign.scheduled_at
    if status_value == "scheduled" and scheduled_at is None:
        raise BusinessRuleError("scheduled_at is required for scheduled campaigns")
    return data


templates_router = build_crud_router(
    model=Template,
    module=Module.COMMUNICATIONS,
    resource="templates",
    label="Template",
    prefix="/api/v1/communications/templates",
    tags=["communications"],
    create_schema=TemplateCreate,
    update_schema=TemplateUpdate,
    response_schema=TemplateResponse,
    order_by=[Template.name],
    filter_fields=("type",),
)

campaigns_router = build_crud_router(
    model=Campaign,
    module=Module.COMMUNICATIONS,
    resource="campaigns",
    label="Campaign",
    prefix="/api/v1/communications/campaigns",
    tags=["communications"],
    create_schema=CampaignCreate,
    update_schema=CampaignUpdate,
    response_schema=CampaignResponse,
    order_by=[Campaign.created_at.desc()],
    filter_fields=("status", "target_audience", "template_id"),
    before_create=campaign_before_create,
    before_update=campaign_before_update,
)


@campaigns_router.post("/{record_id}/send", response_model=CampaignResponse)
async def send_campaign(
    record_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_module(Module.COMMUNICATIONS)),
):
    """Mark a campaign as sent. A campaign is sent only once."""
    campaign = await get_tenant_record(db, ctx, Campaign, record_id, "Campaign")
    if campaign.status == "sent":
        raise ConflictError("Campaign has already been sent")

    campaign.status = "sent"
    campaign.sent_at = dt.datetime.now(dt.timezone.utc)
    log_activity(
        db, ctx.user, "UPDATE", "campaigns", campaign.id,
        changes={"status": "sent"}, organization_id=campaign.organization_id,
    )
    await db.commit()
    await db.refresh(campaign)
    return campaign


router = APIRouter()
router.include_router(templates_router)
router.include_router(campaigns_router)
