"""
Inventory and point-of-sale API routes.

Provides endpoints for:
- Warehouses, product categories and products
- Stock transfers between warehouses
- Sales (stock decrement and automatic journal entry)
"""

import datetime as dt
from typing import Annotated, Dict, List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.exceptions import ConflictError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Product, ProductCategory, Sale, Warehouse
from orgsuite.permissions import Module
from orgsuite.services import inventory as inventory_service
from orgsuite.services.activity import log_activity
from orgsuite.services.records import get_record

Quantity = Annotated[float, Field(ge=0)]


# Warehouses
class WarehouseCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    location: str = Field(..., min_length=2, max_length=255)


class WarehouseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    location: Optional[str] = Field(None, min_length=2, max_length=255)


class WarehouseResponse(TenantRecordResponse):
    name: str
    location: str


async def warehouse_before_delete(db, ctx, warehouse):
    result = await db.execute(
        select(Product).where(Product.organization_id == warehouse.organization_id)
    )
    if any(product.stock_in(warehouse.id) > 0 for product in result.scalars().all()):
        raise ConflictError(f"Warehouse {warehouse.name} still holds stock")


# Categories
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)


class CategoryResponse(TenantRecordResponse):
    name: str


# Products
class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    cost_price: float = Field(..., ge=0)
    sale_price: float = Field(..., ge=0)
    category: str = Field(..., min_length=2, max_length=100)
    image_url: Optional[str] = None
    stock_levels: Dict[UUID, Quantity] = Field(default_factory=dict)


class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = None
    cost_price: Optional[float] = Field(None, ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=2, max_length=100)
    image_url: Optional[str] = None
    stock_levels: Optional[Dict[UUID, Quantity]] = None


class ProductResponse(TenantRecordResponse):
    sku: str
    name: str
    description: Optional[str]
    cost_price: float
    sale_price: float
    category: str
    image_url: Optional[str]
    stock_levels: Dict[str, float]


async def _check_stock_warehouses(db: AsyncSession, organization_id: UUID, data: dict) -> dict:
    for warehouse_id in data.get("stock_levels") or {}:
        await get_record(db, Warehouse, organization_id, UUID(warehouse_id), "Warehouse")
    return data


async def product_before_create(db, ctx, data):
    return await _check_stock_warehouses(db, ctx.require_organization(), data)


async def product_before_update(db, ctx, product, data):
    return await _check_stock_warehouses(db, product.organization_id, data)


# Transfers
class TransferRequest(BaseModel):
    product_id: UUID
    from_warehouse_id: UUID
    to_warehouse_id: UUID
    quantity: float = Field(..., gt=0)


# Sales
class SaleItemCreate(BaseModel):
    product_id: UUID
    quantity: float = Field(..., gt=0)


class SaleCreate(BaseModel):
    items: List[SaleItemCreate] = Field(..., min_length=1)
    warehouse_id: UUID
    payment_method: Literal["cash", "card", "transfer"]
    date: Optional[dt.date] = None


class SaleItemResponse(BaseModel):
    product_id: UUID
    product_name: str
    quantity: float
    price: float
    cost_price: float


class SaleResponse(TenantRecordResponse):
    date: dt.date
    items: List[SaleItemResponse]
    subtotal: float
    tax: float
    total: float
    payment_method: str
    warehouse_id: UUID
    warehouse_name: str


warehouses_router = build_crud_router(
    model=Warehouse,
    module=Module.INVENTORY,
    resource="warehouses",
    label="Warehouse",
    prefix="/api/v1/inventory/warehouses",
    tags=["inventory"],
    create_schema=WarehouseCreate,
    update_schema=WarehouseUpdate,
    response_schema=WarehouseResponse,
    order_by=[Warehouse.name],
    before_delete=warehouse_before_delete,
)

categories_router = build_crud_router(
    model=ProductCategory,
    module=Module.INVENTORY,
    resource="product_categories",
    label="Category",
    prefix="/api/v1/inventory/categories",
    tags=["inventory"],
    create_schema=CategoryCreate,
    update_schema=CategoryUpdate,
    response_schema=CategoryResponse,
    order_by=[ProductCategory.name],
    unique_fields=("name",),
)

products_router = build_crud_router(
    model=Product,
    module=Module.INVENTORY,
    resource="products",
    label="Product",
    prefix="/api/v1/inventory/products",
    tags=["inventory"],
    create_schema=ProductCreate,
    update_schema=ProductUpdate,
    response_schema=ProductResponse,
    order_by=[Product.name],
    unique_fields=("sku",),
    filter_fields=("category", "sku"),
    before_create=product_before_create,
    before_update=product_before_update,
)

transfers_router = APIRouter(prefix="/api/v1/inventory/transfers", tags=["inventory"])
sales_router = APIRouter(prefix="/api/v1/sales", tags=["sales"])
require_sales = require_module(Module.SALES)


@transfers_router.post("", response_model=ProductResponse)
async def transfer_stock(
    transfer: TransferRequest,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_module(Module.INVENTORY)),
):
    """
    Move stock of a product from one warehouse to another.

    Raises 409 when the source warehouse does not hold enough units.
    """
    organization_id = ctx.require_organization()
    product = await inventory_service.transfer_stock(
        db,
        organization_id,
        transfer.product_id,
        transfer.from_warehouse_id,
        transfer.to_warehouse_id,
        transfer.quantity,
    )
    log_activity(
        db, ctx.user, "UPDATE", "products", product.id,
        changes=transfer.model_dump(mode="json"),
        message=f"{ctx.user.name} transferred {transfer.quantity:g} units of {product.name}.",
        organization_id=organization_id,
    )
    await db.commit()
    await db.refresh(product)
    return product


@sales_router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale: SaleCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_sales),
):
    """
    Register a point-of-sale ticket.

    Prices come from the products, tax from the organization settings. Stock
    is taken from the warehouse (409 if insufficient).
    """
    organization_id = ctx.require_organization()
    created = await inventory_service.process_sale(
        db,
        organization_id,
        [item.model_dump() for item in sale.items],
        sale.warehouse_id,
        sale.payment_method,
        sale.date or dt.date.today(),
    )
    log_activity(
        db, ctx.user, "CREATE", "sales", created.id,
        changes={"total": created.total}, organization_id=organization_id,
    )
    await db.commit()
    await db.refresh(created)
    return created


@sales_router.get("", response_model=List[SaleResponse])
async def list_sales(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_sales),
):
    """List sales, newest first."""
    query = ctx.scope(select(Sale), Sale)
    if start_date:
        query = query.where(Sale.date >= start_date)
    if end_date:
        query = query.where(Sale.date <= end_date)
    query = query.order_by(Sale.date.desc(), Sale.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@sales_router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_sales),
):
    return await get_tenant_record(db, ctx, Sale, sale_id, "Sale")


router = APIRouter()
router.include_router(warehouses_router)
router.include_router(categories_router)
router.include_router(products_router)
router.include_router(transfers_router)
router.include_router(sales_router)
