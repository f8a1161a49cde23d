"""
Finance API routes.

Provides endpoints for:
- Chart of accounts (seeded with the general PUC on first listing)
- Journal entries (balanced, applied to account balances when posted)
- Invoices
"""

import datetime as dt
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.api.crud import TenantRecordResponse, build_crud_router, get_tenant_record
from orgsuite.database import get_db
from orgsuite.exceptions import BusinessRuleError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.models import Account, Invoice, JournalEntry
from orgsuite.permissions import Module
from orgsuite.services.accounting import ensure_deletable, post_journal_entry, seed_chart_of_accounts
from orgsuite.services.activity import log_activity

AccountType = Literal["asset", "liability", "equity", "income", "expense"]
InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]


# Accounts
class AccountCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, pattern=r"^\d+$")
    name: str = Field(..., min_length=3, max_length=255)
    type: AccountType
    description: Optional[str] = None
    is_parent: bool = False
    parent_code: Optional[str] = Field(None, max_length=20)


class AccountUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20, pattern=r"^\d+$")
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    type: Optional[AccountType] = None
    description: Optional[str] = None
    parent_code: Optional[str] = Field(None, max_length=20)


class AccountResponse(TenantRecordResponse):
    code: str
    name: str
    type: str
    description: Optional[str]
    is_parent: bool
    parent_code: Optional[str]
    balance: float


async def accounts_before_list(db, ctx):
    if ctx.organization_id is not None:
        if await seed_chart_of_accounts(db, ctx.organization_id):
            await db.commit()


async def accounts_before_delete(db, ctx, account):
    ensure_deletable(account)


# Journal entries
class JournalLine(BaseModel):
    account_id: UUID
    debit: float = Field(0.0, ge=0)
    credit: float = Field(0.0, ge=0)


class JournalEntryCreate(BaseModel):
    date: dt.date
    description: str = Field(..., min_length=3)
    lines: List[JournalLine] = Field(..., min_length=2)


class JournalLineResponse(BaseModel):
    account_id: UUID
    account_code: str
    account_name: str
    debit: float
    credit: float


class JournalEntryResponse(TenantRecordResponse):
    date: dt.date
    description: str
    lines: List[JournalLineResponse]


# Invoices
class InvoiceItem(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., gt=0)
    price: float = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    date: dt.date
    due_date: dt.date
    items: List[InvoiceItem] = Field(..., min_length=1)
    status: InvoiceStatus = "draft"

    @model_validator(mode="after")
    def check_due_date(self):
        if self.due_date < self.date:
            raise ValueError("due_date cannot be before the invoice date")
        return self


class InvoiceUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=2, max_length=255)
    date: Optional[dt.date] = None
    due_date: Optional[dt.date] = None
    items: Optional[List[InvoiceItem]] = Field(None, min_length=1)
    status: Optional[InvoiceStatus] = None


class InvoiceResponse(TenantRecordResponse):
    customer_name: str
    date: dt.date
    due_date: dt.date
    items: List[InvoiceItem]
    total: float
    status: str


def invoice_total(items: list[dict]) -> float:
    return sum(item["quantity"] * item["price"] for item in items)


async def invoice_before_create(db, ctx, data):
    data["total"] = invoice_total(data["items"])
    return data


async def invoice_before_update(db, ctx, invoice, data):
    if data.get("date", invoice.date) > data.get("due_date", invoice.due_date):
        raise BusinessRuleError("due_date cannot be before the invoice date")
    if data.get("items") is not None:
        data["total"] = invoice_total(data["items"])
    return data


accounts_router = build_crud_router(
    model=Account,
    module=Module.FINANCE,
    resource="accounts",
    label="Account",
    prefix="/api/v1/finance/accounts",
    tags=["finance"],
    create_schema=AccountCreate,
    update_schema=AccountUpdate,
    response_schema=AccountResponse,
    order_by=[Account.code],
    unique_fields=("code",),
    filter_fields=("type", "is_parent", "parent_code"),
    before_delete=accounts_before_delete,
    before_list=accounts_before_list,
)

invoices_router = build_crud_router(
    model=Invoice,
    module=Module.FINANCE,
    resource="invoices",
    label="Invoice",
    prefix="/api/v1/finance/invoices",
    tags=["finance"],
    create_schema=InvoiceCreate,
    update_schema=InvoiceUpdate,
    response_schema=InvoiceResponse,
    order_by=[Invoice.date.desc()],
    filter_fields=("status", "customer_name"),
    before_create=invoice_before_create,
    before_update=invoice_before_update,
)

journal_router = APIRouter(prefix="/api/v1/finance/journal-entries", tags=["finance"])
require_finance = require_module(Module.FINANCE)


@journal_router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    entry: JournalEntryCreate,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_finance),
):
    """
    Post a journal entry.

    Debits and credits must balance; account balances are updated.
    """
    organization_id = ctx.require_organization()
    posted = await post_journal_entry(
        db,
        organization_id,
        entry.date,
        entry.description,
        [line.model_dump() for line in entry.lines],
    )
    log_activity(
        db, ctx.user, "CREATE", "journal_entries", posted.id,
        changes={"description": entry.description}, organization_id=organization_id,
    )
    await db.commit()
    await db.refresh(posted)
    return posted


@journal_router.get("", response_model=List[JournalEntryResponse])
async def list_journal_entries(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_finance),
):
    """List journal entries, newest first."""
    query = ctx.scope(select(JournalEntry), JournalEntry)
    if start_date:
        query = query.where(JournalEntry.date >= start_date)
    if end_date:
        query = query.where(JournalEntry.date <= end_date)
    query = query.order_by(JournalEntry.date.desc(), JournalEntry.created_at.desc())
    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@journal_router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_journal_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: TenantContext = Depends(require_finance),
):
    return await get_tenant_record(db, ctx, JournalEntry, entry_id, "Journal entry")


router = APIRouter()
router.include_router(accounts_router)
router.include_router(journal_router)
router.include_router(invoices_router)
