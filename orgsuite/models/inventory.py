"""
Inventory and point of sale: warehouses, categories, products and sales.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, Date, Float, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from orgsuite.models.base import Base, TenantMixin


class Warehouse(TenantMixin, Base):
    __tablename__ = "warehouses"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)


class ProductCategory(TenantMixin, Base):
    __tablename__ = "product_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_org_category_name"),
    )


class Product(TenantMixin, Base):
    """Sellable item with stock kept per warehouse: {warehouse_id: quantity}."""

    __tablename__ = "products"

    sku: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cost_price: Mapped[float] = mapped_column(Float, nullable=False)
    sale_price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    stock_levels: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "sku", name="uq_org_product_sku"),
    )

    def stock_in(self, warehouse_id: UUID) -> float:
        return float((self.stock_levels or {}).get(str(warehouse_id), 0))


class Sale(TenantMixin, Base):
    """
    Point-of-sale ticket.

    items: [{product_id, product_name, quantity, price, cost_price}], prices
    captured at the time of sale for profitability reports.
    """

    __tablename__ = "sales"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    items: Mapped[list] = mapped_column(JSON, nullable=False)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False)
    tax: Mapped[float] = mapped_column(Float, nullable=False)
    total: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)  # cash, card, transfer
    warehouse_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    warehouse_name: Mapped[str] = mapped_column(String(255), nullable=False)
