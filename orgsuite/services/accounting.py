"""
Double-entry bookkeeping.

Balances follow each account's normal side: assets and expenses grow with
debits, liabilities, equity and income grow with credits.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgsuite.exceptions import BusinessRuleError, ConflictError, NotFoundError
from orgsuite.models import Account, JournalEntry, OrganizationSettings, Sale
from orgsuite.services.chart_of_accounts import iter_accounts

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = ("asset", "liability", "equity", "income", "expense")
DEBIT_NORMAL_TYPES = ("asset", "expense")
BALANCE_TOLERANCE = 0.01


async def seed_chart_of_accounts(db: AsyncSession, organization_id: UUID) -> int:
    """Create the general chart of accounts if the organization has no accounts yet."""
    existing = await db.execute(
        select(Account.id).where(Account.organization_id == organization_id).limit(1)
    )
    if existing.first() is not None:
        return 0

    count = 0
    for attributes in iter_accounts():
        db.add(Account(organization_id=organization_id, balance=0.0, **attributes))
        count += 1
    await db.flush()
    logger.info("Seeded chart of accounts (%d accounts) for org %s", count, organization_id)
    return count


def balance_change(account_type: str, debit: float, credit: float) -> float:
    if account_type in DEBIT_NORMAL_TYPES:
        return debit - credit
    return credit - debit


def validate_lines(lines: list[dict]) -> None:
    """
    Check a set of journal lines before posting.

    Raises:
        BusinessRuleError: Fewer than two lines, negative amounts or unbalanced entry
    """
    if len(lines) < 2:
        raise BusinessRuleError("A journal entry needs at least two lines")
    for line in lines:
        if line["debit"] < 0 or line["credit"] < 0:
            raise BusinessRuleError("Debits and credits cannot be negative")
    total_debit = sum(line["debit"] for line in lines)
    total_credit = sum(line["credit"] for line in lines)
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        raise BusinessRuleError(
            f"Journal entry is not balanced: debits {total_debit:.2f} != credits {total_credit:.2f}"
        )


async def post_journal_entry(
    db: AsyncSession,
    organization_id: UUID,
    entry_date: date,
    description: str,
    lines: list[dict],
) -> JournalEntry:
    """
    Validate, store and apply a journal entry to account balances.

    Each line is {account_id, debit, credit}; account code and name are
    copied into the stored line.

    Raises:
        BusinessRuleError: If the lines are invalid
        NotFoundError: If an account is not in the organization
    """
    validate_lines(lines)

    account_ids = {UUID(str(line["account_id"])) for line in lines}
    result = await db.execute(
        select(Account).where(
            Account.organization_id == organization_id, Account.id.in_(account_ids)
        )
    )
    accounts = {account.id: account for account in result.scalars().all()}
    missing = account_ids - set(accounts)
    if missing:
        raise NotFoundError(f"Account {sorted(str(m) for m in missing)[0]} not found")

    stored_lines = []
    for line in lines:
        account = accounts[UUID(str(line["account_id"]))]
        debit, credit = float(line["debit"]), float(line["credit"])
        account.balance = (account.balance or 0.0) + balance_change(account.type, debit, credit)
        stored_lines.append(
            {
                "account_id": str(account.id),
                "account_code": account.code,
                "account_name": account.name,
                "debit": debit,
                "credit": credit,
            }
        )

    entry = JournalEntry(
        organization_id=organization_id,
        date=entry_date,
        description=description,
        lines=stored_lines,
    )
    db.add(entry)
    await db.flush()
    return entry


def ensure_deletable(account: Account) -> None:
    """
    Raises:
        ConflictError: If the account carries a balance or is a class account
    """
    if abs(account.balance or 0.0) > 0:
        raise ConflictError("An account with a balance cannot be deleted")
    if account.is_parent:
        raise ConflictError("Class (parent) accounts cannot be deleted")


async def post_sale_entry(
    db: AsyncSession, sale: Sale, settings: OrganizationSettings
) -> Optional[JournalEntry]:
    """
    Post the automatic entry of a sale.

    Cash is debited for the total; tax payable and revenue are credited; cost
    of goods sold is debited and inventory credited for the cost. Skipped
    with a warning when a default account is not configured.
    """
    accounts = settings.sale_accounts
    if accounts is None:
        logger.warning(
            "Default accounting accounts not set for org %s; skipping journal entry for sale %s",
            sale.organization_id,
            sale.id,
        )
        return None

    cost = sum(item["cost_price"] * item["quantity"] for item in sale.items)
    lines = [
        {"account_id": accounts["cash"], "debit": sale.total, "credit": 0.0},
        {"account_id": accounts["tax"], "debit": 0.0, "credit": sale.tax},
        {"account_id": accounts["revenue"], "debit": 0.0, "credit": sale.subtotal},
        {"account_id": accounts["cogs"], "debit": cost, "credit": 0.0},
        {"account_id": accounts["inventory"], "debit": 0.0, "credit": cost},
    ]
    return await post_journal_entry(
        db,
        sale.organization_id,
        sale.date,
        f"Journal entry for sale #{str(sale.id)[:8]}",
        lines,
    )
