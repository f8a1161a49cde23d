"""
Reports API routes: sales summary, product profitability and inventory
valuation for the caller's organization.
"""

import datetime as dt
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.database import get_db
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.permissions import Module
from orgsuite.services import reports as reports_service

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])
require_reports = require_module(Module.REPORTS)


class SalesSummary(BaseModel):
    start_date: Optional[dt.date]
    end_date: Optional[dt.date]
    count: int
    subtotal: float
    tax: float
    total: float
    by_payment_method: Dict[str, float]


class ProductProfitability(BaseModel):
    product_id: str
    product_name: str
    units_sold: float
    revenue: float
    cost: float
    margin: float
    margin_percentage: float


class ValuationItem(BaseModel):
    product_id: str
    sku: str
    product_name: str
    units: float
    cost_value: float
    sale_value: float


class InventoryValuation(BaseModel):
    items: List[ValuationItem]
    total_units: float
    total_cost_value: float


@router.get("/sales-summary", response_model=SalesSummary)
async def sales_summary(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_reports),
):
    return await reports_service.sales_summary(db, ctx.require_organization(), start_date, end_date)


@router.get("/product-profitability", response_model=List[ProductProfitability])
async def product_profitability(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_reports),
):
    """Revenue, cost and margin per product, best margin first."""
    return await reports_service.product_profitability(
        db, ctx.require_organization(), start_date, end_date
    )


@router.get("/inventory-valuation", response_model=InventoryValuation)
async def inventory_valuation(
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_reports),
):
    return await reports_service.inventory_valuation(db, ctx.require_organization())
