"""
Payroll API routes.

Provides endpoints for:
- Generating the payrolls of a period
- Listing and reading payrolls
- Adding and removing novelties (bonuses and deductions)
- Paying or cancelling a payroll
"""

import datetime as dt
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, get_tenant_record
from orgsuite.database import get_db
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Payroll
from orgsuite.permissions import Module
from orgsuite.services import payroll as payroll_service
from orgsuite.services.activity import log_activity

router = APIRouter(prefix="/api/v1/payroll", tags=["payroll"])
require_hr = require_module(Module.HR)


# Pydantic schemas
class GenerateRequest(BaseModel):
    """Schema for generating the payrolls of a period."""

    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class NoveltyCreate(BaseModel):
    """Schema for a bonus or deduction."""

    description: str = Field(..., min_length=3, max_length=255)
    amount: float = Field(..., gt=0)
    type: Literal["bonus", "deduction"]


class Novelty(BaseModel):
    id: str
    description: str
    amount: float
    type: str


class PayrollResponse(TenantRecordResponse):
    employee_id: UUID
    employee_name: str
    period: str
    base_salary: float
    worked_hours: float
    contracted_hours: int
    bonuses: List[Novelty]
    deductions: List[Novelty]
    legal_deductions: List[Novelty]
    total_bonuses: float
    total_deductions: float
    total_legal_deductions: float
    net_pay: float
    status: str
    payment_date: Optional[dt.datetime]


@router.post("/generate", response_model=List[PayrollResponse], status_code=status.HTTP_201_CREATED)
async def generate_payrolls(
    request: GenerateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    """
    Generate one pending payroll per active employee for a period.

    Raises 409 if the period already exists and 422 if there are no active
    employees.
    """
    organization_id = ctx.require_organization()
    payrolls = await payroll_service.generate_payrolls(
        db, organization_id, request.start_date, request.end_date
    )
    log_activity(
        db, ctx.user, "CREATE", "payrolls", None,
        changes={"period": payrolls[0].period, "count": len(payrolls)},
        message=f"{ctx.user.name} generated payroll for {payrolls[0].period}.",
        organization_id=organization_id,
    )
    await db.commit()
    return payrolls


@router.get("", response_model=List[PayrollResponse])
async def list_payrolls(
    period: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    employee_id: Optional[UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    """List payrolls, newest period first."""
    query = ctx.scope(select(Payroll), Payroll)
    if period:
        query = query.where(Payroll.period == period)
    if status_filter:
        query = query.where(Payroll.status == status_filter)
    if employee_id:
        query = query.where(Payroll.employee_id == employee_id)

    query = query.order_by(Payroll.period.desc(), Payroll.employee_name).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{payroll_id}", response_model=PayrollResponse)
async def get_payroll(
    payroll_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    return await get_tenant_record(db, ctx, Payroll, payroll_id, "Payroll")


@router.post(
    "/{payroll_id}/novelties", response_model=PayrollResponse, status_code=status.HTTP_201_CREATED
)
async def add_novelty(
    payroll_id: UUID,
    novelty: NoveltyCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    """Add a bonus or deduction and recalculate the payroll totals."""
    payroll = await get_tenant_record(db, ctx, Payroll, payroll_id, "Payroll")
    added = payroll_service.add_novelty(payroll, novelty.description, novelty.amount, novelty.type)
    log_activity(
        db, ctx.user, "UPDATE", "payrolls", payroll.id,
        changes={"added_novelty": added}, organization_id=payroll.organization_id,
    )
    await db.commit()
    await db.refresh(payroll)
    return payroll


@router.delete("/{payroll_id}/novelties/{novelty_id}", response_model=PayrollResponse)
async def remove_novelty(
    payroll_id: UUID,
    novelty_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    """Remove a bonus or manual deduction and recalculate the payroll totals."""
    payroll = await get_tenant_record(db, ctx, Payroll, payroll_id, "Payroll")
    removed = payroll_service.remove_novelty(payroll, novelty_id)
    log_activity(
        db, ctx.user, "UPDATE", "payrolls", payroll.id,
        changes={"removed_novelty": removed}, organization_id=payroll.organization_id,
    )
    await db.commit()
    await db.refresh(payroll)
    return payroll


@router.post("/{payroll_id}/pay", response_model=PayrollResponse)
async def pay_payroll(
    payroll_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    payroll = await get_tenant_record(db, ctx, Payroll, payroll_id, "Payroll")
    payroll_service.mark_paid(payroll)
    log_activity(
        db, ctx.user, "UPDATE", "payrolls", payroll.id,
        changes={"status": "paid"}, organization_id=payroll.organization_id,
    )
    await db.commit()
    await db.refresh(payroll)
    return payroll


@router.post("/{payroll_id}/cancel", response_model=PayrollResponse)
async def cancel_payroll(
    payroll_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_hr),
):
    payroll = await get_tenant_record(db, ctx, Payroll, payroll_id, "Payroll")
    payroll_service.cancel(payroll)
    log_activity(
        db, ctx.user, "UPDATE", "payrolls", payroll.id,
        changes={"status": "cancelled"}, organization_id=payroll.organization_id,
    )
    await db.commit()
    await db.refresh(payroll)
    return payroll
