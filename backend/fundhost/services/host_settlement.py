"""Host Settlement — invoice hosts for the debts they owe the platform, then settle them.

Invariants:
    - An invoice is a SETTLEMENT expense paid by the host to the platform,
      with one item per OWED debt (matched back by transaction_group + kind)
    - Invoicing moves the debts' settlements OWED -> INVOICED and sets expense_id
    - Paying the invoice moves its INVOICED settlements to SETTLED
    - Only debts in the host currency are invoiced; others stay OWED

Design Decisions:
    - invoice_host_debts and mark_invoice_settled flush only; run_host_settlement
      commits once per host so one failing host does not roll back the others
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import (
    ActivityType, ExpenseStatus, ExpenseType, TransactionSettlementStatus,
)
from fundhost.core.errors import (
    ConflictError, ErrorContext, FundhostError, ResourceNotFoundError, ValidationError,
)
from fundhost.db.base import utcnow
from fundhost.models.collective import Collective
from fundhost.models.expense import Expense, ExpenseItem
from fundhost.models.transaction_settlement import TransactionSettlement
from fundhost.services import transaction_settlements
from fundhost.services.accounts import get_account_by_slug
from fundhost.services.activities import record_activity

logger = logging.getLogger(__name__)


async def invoice_host_debts(
    db: AsyncSession, host: Collective, platform: Collective,
) -> Expense | None:
    """Create the settlement invoice for a host's owed debts; None when nothing is owed."""
    debts = await transaction_settlements.get_host_debts(
        db, host.id, TransactionSettlementStatus.OWED,
    )
    invoiceable = [t for t in debts if t.currency == host.currency]
    skipped = len(debts) - len(invoiceable)
    if skipped:
        logger.warning(
            f"{skipped} debts not in {host.currency} left owed",
            extra={"collective_id": host.id},
        )
    if not invoiceable:
        return None

    expense = Expense(
        collective_id=host.id,
        from_collective_id=platform.id,
        type=ExpenseType.SETTLEMENT.value,
        status=ExpenseStatus.PENDING.value,
        description=f"Platform settlement for {host.name}",
        currency=host.currency,
        amount=sum(t.amount for t in invoiceable),
        items=[
            ExpenseItem(
                amount=t.amount,
                description=t.description or t.kind,
                transaction_group=t.transaction_group,
                transaction_kind=t.kind,
            )
            for t in invoiceable
        ],
    )
    db.add(expense)
    await db.flush()

    await transaction_settlements.update_transactions_settlement_status(
        db, invoiceable, TransactionSettlementStatus.INVOICED, expense_id=expense.id,
    )
    for transaction in invoiceable:
        transaction.settlement_status = TransactionSettlementStatus.INVOICED.value

    record_activity(
        db, ActivityType.SETTLEMENT_INVOICED, collective_id=host.id,
        data={"expense_id": expense.id, "amount": expense.amount, "debts": len(invoiceable)},
    )
    await db.flush()
    logger.info(
        f"Invoiced {len(invoiceable)} debts for {expense.amount} {expense.currency}",
        extra={"collective_id": host.id, "expense_id": expense.id},
    )
    return expense


async def mark_invoice_settled(db: AsyncSession, expense: Expense) -> int:
    """Mark a settlement invoice paid; returns the number of settlements settled."""
    context = ErrorContext(collective_id=expense.collective_id)
    if expense.type != ExpenseType.SETTLEMENT.value:
        raise ValidationError(
            "Only settlement expenses can settle debts", field="expense", context=context,
        )
    if expense.status not in (ExpenseStatus.PENDING.value, ExpenseStatus.APPROVED.value):
        raise ConflictError(f"Settlement expense is already {expense.status}", context)

    expense.status = ExpenseStatus.PAID.value
    result = await db.execute(
        update(TransactionSettlement)
        .where(TransactionSettlement.expense_id == expense.id)
        .where(TransactionSettlement.status == TransactionSettlementStatus.INVOICED.value)
        .where(TransactionSettlement.deleted_at.is_(None))
        .values(status=TransactionSettlementStatus.SETTLED.value, updated_at=utcnow())
        .execution_options(synchronize_session="fetch"),
    )
    record_activity(
        db, ActivityType.SETTLEMENT_PAID, collective_id=expense.collective_id,
        data={"expense_id": expense.id, "amount": expense.amount},
    )
    await db.flush()
    logger.info(
        f"Settlement invoice paid, {result.rowcount} debts settled",
        extra={"expense_id": expense.id, "collective_id": expense.collective_id},
    )
    return result.rowcount


async def run_host_settlement(
    db: AsyncSession, platform_slug: str, dry_run: bool = False,
) -> list[dict]:
    """Invoice every account with owed debts. Returns one summary per debtor."""
    platform = await get_account_by_slug(db, platform_slug)
    if platform is None:
        raise ResourceNotFoundError("Account", platform_slug)

    platform_id = platform.id
    debtor_ids = [
        account.id
        for account in await transaction_settlements.get_accounts_with_owed_settlements(db)
        if account.id != platform_id
    ]
    summaries = []
    failed = []
    for host_id in debtor_ids:
        # rollback expires every instance: reload both accounts per host
        host = await db.get(Collective, host_id)
        platform = await db.get(Collective, platform_id)
        host_slug = host.slug
        if dry_run:
            debts = await transaction_settlements.get_host_debts(
                db, host.id, TransactionSettlementStatus.OWED,
            )
            invoiceable = [t for t in debts if t.currency == host.currency]
            summaries.append({
                "host": host.slug,
                "debts": len(invoiceable),
                "amount": sum(t.amount for t in invoiceable),
                "expense_id": None,
            })
            continue
        try:
            expense = await invoice_host_debts(db, host, platform)
            await db.commit()
        except FundhostError as e:
            await db.rollback()
            logger.error(
                f"Host settlement failed for {host_slug}: {e.message}",
                extra={"collective_id": host_id, "error_code": e.code},
            )
            failed.append(host_slug)
            continue
        summaries.append({
            "host": host.slug,
            "debts": len(expense.items) if expense else 0,
            "amount": expense.amount if expense else 0,
            "expense_id": expense.id if expense else None,
        })
    logger.info(
        f"Host settlement run finished for {len(summaries)} accounts, {len(failed)} failed",
    )
    return summaries
