"""
Sales and inventory reports computed from stored sales and products.
"""

from collections import defaultdict
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.models import Product, Sale


async def _sales(
    db: AsyncSession, organization_id: UUID, start_date: Optional[date], end_date: Optional[date]
) -> list[Sale]:
    query = select(Sale).where(Sale.organization_id == organization_id)
    if start_date is not None:
        query = query.where(Sale.date >= start_date)
    if end_date is not None:
        query = query.where(Sale.date <= end_date)
    result = await db.execute(query.order_by(Sale.date))
    return list(result.scalars().all())


async def sales_summary(
    db: AsyncSession,
    organization_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict:
    sales = await _sales(db, organization_id, start_date, end_date)
    by_method: dict[str, float] = defaultdict(float)
    for sale in sales:
        by_method[sale.payment_method] += sale.total
    return {
        "start_date": start_date,
        "end_date": end_date,
        "count": len(sales),
        "subtotal": sum(s.subtotal for s in sales),
        "tax": sum(s.tax for s in sales),
        "total": sum(s.total for s in sales),
        "by_payment_method": dict(by_method),
    }


async def product_profitability(
    db: AsyncSession,
    organization_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[dict]:
    """Revenue, cost and margin per product sold, best margin first."""
    rows: dict[str, dict] = {}
    for sale in await _sales(db, organization_id, start_date, end_date):
        for item in sale.items:
            row = rows.setdefault(
                item["product_id"],
                {
                    "product_id": item["product_id"],
                    "product_name": item["product_name"],
                    "units_sold": 0.0,
                    "revenue": 0.0,
                    "cost": 0.0,
                },
            )
            row["units_sold"] += item["quantity"]
            row["revenue"] += item["price"] * item["quantity"]
            row["cost"] += item["cost_price"] * item["quantity"]

    for row in rows.values():
        row["margin"] = row["revenue"] - row["cost"]
        row["margin_percentage"] = (row["margin"] / row["revenue"] * 100) if row["revenue"] else 0.0

    return sorted(rows.values(), key=lambda r: r["margin"], reverse=True)


async def inventory_valuation(db: AsyncSession, organization_id: UUID) -> dict:
    """Units on hand and their value at cost, per product and in total."""
    result = await db.execute(
        select(Product).where(Product.organization_id == organization_id).order_by(Product.name)
    )
    items = []
    for product in result.scalars().all():
        units = sum(float(q) for q in (product.stock_levels or {}).values())
        items.append(
            {
                "product_id": str(product.id),
                "sku": product.sku,
                "product_name": product.name,
                "units": units,
                "cost_value": units * product.cost_price,
                "sale_value": units * product.sale_price,
            }
        )
    return {
        "items": items,
        "total_units": sum(i["units"] for i in items),
        "total_cost_value": sum(i["cost_value"] for i in items),
    }
