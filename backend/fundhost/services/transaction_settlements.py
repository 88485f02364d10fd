"""Transaction Settlements — track, reconcile and revert debts between hosts and the platform.

Invariants:
    - A settlement is matched to transactions by (transaction_group, kind), never by id
    - Only live rows participate: transactions and settlements with deleted_at set are ignored
    - Debts are CREDIT rows with is_debt set; the account carrying the row is the debtor
    - Functions flush but never commit: the calling operation owns the unit of work

Design Decisions:
    - settlement_status attached to Transaction instances as a plain attribute: GraphQL
      and reports read it without a second query
    - revert_settlement_for_refund branches on status explicitly and refuses unknown
      statuses (ADR: a silent no-op would leave the ledger inconsistent)
    - An invoice already paid is reverted like a settled debt: the money has moved
"""

import logging
from collections.abc import Sequence

from sqlalchemy import select, update, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import (
    CollectiveId, ExpenseStatus, TransactionGroup, TransactionSettlementStatus,
    TransactionType,
)
from fundhost.core.errors import ErrorContext, SettlementStateError
from fundhost.db.base import utcnow
from fundhost.models.collective import Collective
from fundhost.models.expense import Expense
from fundhost.models.transaction import Transaction
from fundhost.models.transaction_settlement import TransactionSettlement

logger = logging.getLogger(__name__)

_UNSET = object()


def _matches_transactions(transactions: Sequence[Transaction]):
    """WHERE clause selecting settlements of the given transactions' (group, kind) pairs."""
    pairs = sorted(
        {(t.transaction_group, t.kind) for t in transactions},
        key=lambda pair: (str(pair[0]), pair[1]),
    )
    return or_(*(
        and_(
            TransactionSettlement.transaction_group == group,
            TransactionSettlement.kind == kind,
        )
        for group, kind in pairs
    ))


def _settlement_join():
    return and_(
        Transaction.transaction_group == TransactionSettlement.transaction_group,
        Transaction.kind == TransactionSettlement.kind,
    )


def _live_debt_credits():
    return (
        Transaction.type == TransactionType.CREDIT.value,
        Transaction.is_debt.is_(True),
        Transaction.deleted_at.is_(None),
        TransactionSettlement.deleted_at.is_(None),
    )


# ─── Creation & updates ─────────────────────────────────────────

async def create_for_transaction(
    db: AsyncSession,
    transaction: Transaction,
    status: TransactionSettlementStatus = TransactionSettlementStatus.OWED,
) -> TransactionSettlement:
    """Start tracking the settlement of a debt transaction."""
    settlement = TransactionSettlement(
        transaction_group=transaction.transaction_group,
        kind=transaction.kind,
        status=TransactionSettlementStatus(status).value,
    )
    db.add(settlement)
    await db.flush()
    logger.info(
        f"Settlement created for {transaction.kind}",
        extra={
            "transaction_group": transaction.transaction_group,
            "settlement_status": settlement.status,
        },
    )
    return settlement


async def update_transactions_settlement_status(
    db: AsyncSession,
    transactions: Sequence[Transaction],
    status: TransactionSettlementStatus,
    expense_id: int | None = _UNSET,
) -> int:
    """Set status (and expense_id when given) on the settlements of these transactions.

    Returns the number of settlements updated. An empty list is a no-op.
    """
    if not transactions:
        return 0
    values = {
        "status": TransactionSettlementStatus(status).value,
        "updated_at": utcnow(),
    }
    if expense_id is not _UNSET:
        values["expense_id"] = expense_id
    result = await db.execute(
        update(TransactionSettlement)
        .where(TransactionSettlement.deleted_at.is_(None))
        .where(_matches_transactions(transactions))
        .values(**values)
        .execution_options(synchronize_session="fetch"),
    )
    return result.rowcount


async def attach_statuses_to_transactions(
    db: AsyncSession, transactions: Sequence[Transaction],
) -> None:
    """Set settlement_status on every debt transaction; non-debts are left untouched."""
    debts = [t for t in transactions if t.is_debt]
    if not debts:
        return
    result = await db.execute(
        select(TransactionSettlement)
        .where(TransactionSettlement.deleted_at.is_(None))
        .where(_matches_transactions(debts))
        .order_by(TransactionSettlement.id),
    )
    statuses: dict[tuple, str] = {}
    for settlement in result.scalars():
        statuses.setdefault(
            (settlement.transaction_group, settlement.kind), settlement.status,
        )
    for transaction in debts:
        transaction.settlement_status = statuses.get(
            (transaction.transaction_group, transaction.kind),
        )


# ─── Queries ─────────────────────────────────────────────────────

async def get_accounts_with_owed_settlements(db: AsyncSession) -> list[Collective]:
    """Accounts carrying at least one debt whose settlement is still OWED."""
    debtors = (
        select(Transaction.collective_id)
        .join(TransactionSettlement, _settlement_join())
        .where(*_live_debt_credits())
        .where(TransactionSettlement.status == TransactionSettlementStatus.OWED.value)
    )
    result = await db.execute(
        select(Collective)
        .where(Collective.id.in_(debtors))
        .order_by(Collective.id),
    )
    return list(result.scalars().all())


async def get_host_debts(
    db: AsyncSession,
    host_id: CollectiveId,
    settlement_status: TransactionSettlementStatus | None = None,
) -> list[Transaction]:
    """Debt transactions of a host, each with settlement_status attached."""
    query = (
        select(Transaction, TransactionSettlement.status)
        .join(TransactionSettlement, _settlement_join())
        .where(Transaction.collective_id == host_id)
        .where(*_live_debt_credits())
    )
    if settlement_status:
        query = query.where(
            TransactionSettlement.status
            == TransactionSettlementStatus(settlement_status).value,
        )
    result = await db.execute(
        query.order_by(Transaction.created_at, Transaction.id),
    )
    debts = []
    for transaction, status in result.all():
        transaction.settlement_status = status
        debts.append(transaction)
    return debts


async def find_settlement(
    db: AsyncSession, transaction_group: TransactionGroup, kind: str,
) -> TransactionSettlement | None:
    result = await db.execute(
        select(TransactionSettlement)
        .where(TransactionSettlement.transaction_group == transaction_group)
        .where(TransactionSettlement.kind == kind)
        .where(TransactionSettlement.deleted_at.is_(None))
        .order_by(TransactionSettlement.id)
        .limit(1),
    )
    return result.scalar_one_or_none()


# ─── Refunds ─────────────────────────────────────────────────────

async def revert_settlement_for_refund(
    db: AsyncSession,
    settlement: TransactionSettlement,
    refund_transaction: Transaction,
) -> None:
    """Undo the accounting of a debt after its transaction was refunded."""
    status = settlement.status
    log_extra = {
        "transaction_group": settlement.transaction_group,
        "settlement_status": status,
    }

    if status == TransactionSettlementStatus.OWED.value:
        # Never accounted for: the debt simply disappears
        settlement.soft_delete()
        await db.flush()
        logger.info("Owed settlement dropped after refund", extra=log_extra)

    elif status == TransactionSettlementStatus.INVOICED.value:
        expense = await _get_invoice(db, settlement)
        if expense.status == ExpenseStatus.PAID.value:
            logger.info("Invoice already paid, refund recorded as owed", extra=log_extra)
            await create_for_transaction(db, refund_transaction)
            return
        await _remove_debt_from_invoice(db, expense, settlement)
        logger.info(
            "Debt removed from invoice after refund",
            extra={**log_extra, "expense_id": expense.id},
        )

    elif status == TransactionSettlementStatus.SETTLED.value:
        # Platform already paid: it now owes the refunded amount back to the host
        await create_for_transaction(db, refund_transaction)
        logger.info("Settled debt reversed as owed", extra=log_extra)

    else:
        raise SettlementStateError(
            f"Don't know how to revert this status: {status}",
            ErrorContext(transaction_group=str(settlement.transaction_group)),
        )


async def _get_invoice(
    db: AsyncSession, settlement: TransactionSettlement,
) -> Expense:
    expense = None
    if settlement.expense_id is not None:
        expense = await db.get(Expense, settlement.expense_id)
    if expense is None or expense.is_deleted:
        raise SettlementStateError(
            "Invoiced settlement has no invoice",
            ErrorContext(transaction_group=str(settlement.transaction_group)),
        )
    return expense


async def _remove_debt_from_invoice(
    db: AsyncSession, expense: Expense, settlement: TransactionSettlement,
) -> None:
    item = next(
        (
            i for i in expense.items
            if i.transaction_group == settlement.transaction_group
            and i.transaction_kind == settlement.kind
        ),
        None,
    )
    if item is None:
        raise SettlementStateError(
            f"Invoice {expense.id} has no item for this debt",
            ErrorContext(transaction_group=str(settlement.transaction_group)),
        )
    expense.amount -= item.amount
    expense.items.remove(item)
    if not expense.items:
        expense.status = ExpenseStatus.CANCELED.value
    settlement.soft_delete()
    await db.flush()
