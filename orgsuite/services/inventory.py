"""
Stock movements: transfers between warehouses and point-of-sale checkout.

Stock is kept on the product as {warehouse_id: quantity}. Every movement
checks availability before changing anything, so a refused operation
leaves stock untouched.
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.exceptions import BusinessRuleError, ConflictError, NotFoundError
from orgsuite.models import Product, Sale, Warehouse
from orgsuite.services.accounting import post_sale_entry
from orgsuite.services.settings import get_organization_settings

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("cash", "card", "transfer")


def adjust_stock(product: Product, warehouse_id: UUID, delta: float) -> None:
    """
    Add ``delta`` units (negative to remove) in a warehouse.

    Raises:
        ConflictError: If the warehouse would go below zero
    """
    key = str(warehouse_id)
    levels = dict(product.stock_levels or {})
    new_level = float(levels.get(key, 0)) + delta
    if new_level < 0:
        raise ConflictError(
            f"Insufficient stock for {product.name}: {levels.get(key, 0)} available"
        )
    levels[key] = new_level
    product.stock_levels = levels


async def get_warehouse(db: AsyncSession, organization_id: UUID, warehouse_id: UUID) -> Warehouse:
    result = await db.execute(
        select(Warehouse).where(
            Warehouse.id == warehouse_id, Warehouse.organization_id == organization_id
        )
    )
    warehouse = result.scalar_one_or_none()
    if warehouse is None:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


async def get_product(db: AsyncSession, organization_id: UUID, product_id: UUID) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.organization_id == organization_id)
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


async def transfer_stock(
    db: AsyncSession,
    organization_id: UUID,
    product_id: UUID,
    from_warehouse_id: UUID,
    to_warehouse_id: UUID,
    quantity: float,
) -> Product:
    """
    Move units of a product between two warehouses of the organization.

    Raises:
        BusinessRuleError: Same warehouse or non-positive quantity
        NotFoundError: Unknown product or warehouse
        ConflictError: Not enough stock at the source
    """
    if from_warehouse_id == to_warehouse_id:
        raise BusinessRuleError("Source and destination warehouses must differ")
    if quantity <= 0:
        raise BusinessRuleError("Quantity must be greater than zero")

    product = await get_product(db, organization_id, product_id)
    await get_warehouse(db, organization_id, from_warehouse_id)
    await get_warehouse(db, organization_id, to_warehouse_id)

    if product.stock_in(from_warehouse_id) < quantity:
        raise ConflictError(
            f"Insufficient stock for {product.name}: {product.stock_in(from_warehouse_id):g} available"
        )

    adjust_stock(product, from_warehouse_id, -quantity)
    adjust_stock(product, to_warehouse_id, quantity)
    logger.info(
        "Transferred %s x %s from %s to %s", quantity, product.sku, from_warehouse_id, to_warehouse_id
    )
    return product


async def process_sale(
    db: AsyncSession,
    organization_id: UUID,
    items: list[dict],
    warehouse_id: UUID,
    payment_method: str,
    sale_date: date,
) -> Sale:
    """
    Register a sale, take the units out of stock and post its journal entry.

    ``items`` is [{product_id, quantity}]. Prices and costs are read from the
    products; tax uses the organization's tax rate (percent).

    Raises:
        BusinessRuleError: Empty sale, bad quantity or payment method
        NotFoundError: Unknown product or warehouse
        ConflictError: Not enough stock in the warehouse
    """
    if not items:
        raise BusinessRuleError("A sale needs at least one item")
    if payment_method not in PAYMENT_METHODS:
        raise BusinessRuleError(f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")

    warehouse = await get_warehouse(db, organization_id, warehouse_id)

    # Resolve every product and check availability before touching stock
    requested: dict[UUID, float] = {}
    products: dict[UUID, Product] = {}
    for item in items:
        if item["quantity"] <= 0:
            raise BusinessRuleError("Quantity must be greater than zero")
        product_id = UUID(str(item["product_id"]))
        if product_id not in products:
            products[product_id] = await get_product(db, organization_id, product_id)
        requested[product_id] = requested.get(product_id, 0) + item["quantity"]

    for product_id, quantity in requested.items():
        product = products[product_id]
        available = product.stock_in(warehouse_id)
        if available < quantity:
            raise ConflictError(
                f"Insufficient stock for {product.name} in {warehouse.name}: {available:g} available"
            )

    sale_items = []
    for item in items:
        product = products[UUID(str(item["product_id"]))]
        sale_items.append(
            {
                "product_id": str(product.id),
                "product_name": product.name,
                "quantity": item["quantity"],
                "price": product.sale_price,
                "cost_price": product.cost_price,
            }
        )
        adjust_stock(product, warehouse_id, -item["quantity"])

    org_settings = await get_organization_settings(db, organization_id)
    subtotal = sum(item["price"] * item["quantity"] for item in sale_items)
    tax = subtotal * org_settings.tax_rate / 100
    sale = Sale(
        organization_id=organization_id,
        date=sale_date,
        items=sale_items,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        payment_method=payment_method,
        warehouse_id=warehouse.id,
        warehouse_name=warehouse.name,
    )
    db.add(sale)
    await db.flush()

    await post_sale_entry(db, sale, org_settings)
    logger.info("Sale %s registered: total %.2f (org %s)", sale.id, sale.total, organization_id)
    return sale
