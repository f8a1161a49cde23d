"""
CRM API routes.

Provides CRUD for customers and opportunities, and the interaction log of
each customer.
"""

import datetime as dt
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Customer, Interaction, Opportunity
from orgsuite.permissions import Module
from orgsuite.services.activity import log_activity
from orgsuite.services.records import get_org_user, get_record

IdentificationType = Literal["CC", "CE", "NIT", "passport"]
CustomerType = Literal["prospect", "active", "inactive", "potential"]
OpportunityStatus = Literal["qualification", "proposal", "negotiation", "won", "lost"]
CLOSED_STATUSES = ("won", "lost")


# Customers
class CustomerCreate(BaseModel):
    is_business: bool = False
    identification_type: IdentificationType
    identification_number: str = Field(..., min_length=5, max_length=50)
    name: str = Field(..., min_length=2, max_length=255)
    customer_type: CustomerType
    department: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    economic_activity: Optional[str] = Field(None, max_length=20)
    company_size: Optional[str] = Field(None, max_length=20)
    acquisition_channel: Optional[str] = Field(None, max_length=100)


class CustomerUpdate(BaseModel):
    is_business: Optional[bool] = None
    identification_type: Optional[IdentificationType] = None
    identification_number: Optional[str] = Field(None, min_length=5, max_length=50)
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    customer_type: Optional[CustomerType] = None
    department: Optional[str] = Field(None, max_length=100)
    municipality: Optional[str] = Field(None, max_length=100)
    economic_activity: Optional[str] = Field(None, max_length=20)
    company_size: Optional[str] = Field(None, max_length=20)
    acquisition_channel: Optional[str] = Field(None, max_length=100)


class CustomerResponse(TenantRecordResponse):
    is_business: bool
    identification_type: str
    identification_number: str
    name: str
    customer_type: str
    department: Optional[str]
    municipality: Optional[str]
    economic_activity: Optional[str]
    company_size: Optional[str]
    acquisition_channel: Optional[str]


# Opportunities
class OpportunityCreate(BaseModel):
    name: str = Field(..., min_length=5, max_length=255)
    customer_id: UUID
    estimated_value: float = Field(0.0, ge=0)
    status: OpportunityStatus = "qualification"
    assigned_to_id: UUID


class OpportunityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=5, max_length=255)
    estimated_value: Optional[float] = Field(None, ge=0)
    status: Optional[OpportunityStatus] = None
    assigned_to_id: Optional[UUID] = None


class OpportunityResponse(TenantRecordResponse):
    name: str
    customer_id: UUID
    customer_name: str
    estimated_value: float
    status: str
    assigned_to_id: UUID
    assigned_to_name: str
    closed_at: Optional[dt.datetime]


def _closing_date(status_value: str) -> Optional[dt.datetime]:
    return dt.datetime.now(dt.timezone.utc) if status_value in CLOSED_STATUSES else None


async def opportunity_before_create(db, ctx, data):
    organization_id = ctx.require_organization()
    customer = await get_record(db, Customer, organization_id, data["customer_id"], "Customer")
    assignee = await get_org_user(db, organization_id, data["assigned_to_id"])
    data["customer_name"] = customer.name
    data["assigned_to_name"] = assignee.name
    data["closed_at"] = _closing_date(data["status"])
    return data


async def opportunity_before_update(db, ctx, opportunity, data):
    if data.get("assigned_to_id") is not None:
        assignee = await get_org_user(db, opportunity.organization_id, data["assigned_to_id"])
        data["assigned_to_name"] = assignee.name
    new_status = data.get("status")
    if new_status is not None and new_status != opportunity.status:
        # Closing sets the date, reopening clears it
        if new_status in CLOSED_STATUSES and opportunity.status not in CLOSED_STATUSES:
            data["closed_at"] = _closing_date(new_status)
        elif new_status not in CLOSED_STATUSES:
            data["closed_at"] = None
    return data


# Interactions
class InteractionCreate(BaseModel):
    type: Literal["call", "meeting", "email"]
    date: dt.date
    notes: str = Field(..., min_length=5)


class InteractionResponse(TenantRecordResponse):
    customer_id: UUID
    type: str
    date: dt.date
    notes: str
    user_id: UUID
    user_name: str


customers_router = build_crud_router(
    model=Customer,
    module=Module.CRM,
    resource="customers",
    label="Customer",
    prefix="/api/v1/crm/customers",
    tags=["crm"],
    create_schema=CustomerCreate,
    update_schema=CustomerUpdate,
    response_schema=CustomerResponse,
    order_by=[Customer.name],
    unique_fields=("identification_number",),
    filter_fields=("customer_type", "is_business", "acquisition_channel"),
)

opportunities_router = build_crud_router(
    model=Opportunity,
    module=Module.CRM,
    resource="opportunities",
    label="Opportunity",
    prefix="/api/v1/crm/opportunities",
    tags=["crm"],
    create_schema=OpportunityCreate,
    update_schema=OpportunityUpdate,
    response_schema=OpportunityResponse,
    order_by=[Opportunity.created_at.desc()],
    filter_fields=("status", "customer_id", "assigned_to_id"),
    before_create=opportunity_before_create,
    before_update=opportunity_before_update,
)

require_crm = require_module(Module.CRM)


@customers_router.post(
    "/{customer_id}/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_interaction(
    customer_id: UUID,
    interaction: InteractionCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_crm),
):
    """Log a call, meeting or email with a customer, signed by the caller."""
    customer = await get_tenant_record(db, ctx, Customer, customer_id, "Customer")
    record = Interaction(
        organization_id=customer.organization_id,
        customer_id=customer.id,
        type=interaction.type,
        date=interaction.date,
        notes=interaction.notes,
        user_id=ctx.user.id,
        user_name=ctx.user.name,
    )
    db.add(record)
    await db.flush()
    log_activity(
        db, ctx.user, "CREATE", "interactions", record.id,
        changes={"customer_id": str(customer.id), "type": interaction.type},
        organization_id=customer.organization_id,
    )
    await db.commit()
    await db.refresh(record)
    return record


@customers_router.get("/{customer_id}/interactions", response_model=List[InteractionResponse])
async def list_interactions(
    customer_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_crm),
):
    """Interactions with a customer, most recent first."""
    customer = await get_tenant_record(db, ctx, Customer, customer_id, "Customer")
    result = await db.execute(
        select(Interaction)
        .where(
            Interaction.organization_id == customer.organization_id,
            Interaction.customer_id == customer.id,
        )
        .order_by(Interaction.date.desc(), Interaction.created_at.desc())
    )
    return result.scalars().all()


router = APIRouter()
router.include_router(customers_router)
router.include_router(opportunities_router)
