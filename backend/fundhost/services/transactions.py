"""Transactions — record contributions as double-entry pairs and refund them.

Invariants:
    - Every financial event writes CREDIT/DEBIT pairs sharing one transaction_group
    - CREDIT amount == -DEBIT amount within a pair; amounts are integer cents
    - A platform tip creates a PLATFORM_TIP_DEBT pair (CREDIT debt on the host) and an
      OWED settlement for it: the host collected the tip and owes it to the platform
    - A refund reverses every live, non-refunded row of the group into a new group
      and reverts the settlement of each debt kind it touches
    - Functions flush but never commit: the calling operation owns the unit of work

Design Decisions:
    - Refund rows keep the accounts of the original row, flip the type and negate the
      amount: the refund of a debt CREDIT on the host is a debt DEBIT on the host
    - The contributor becomes a BACKER of the collective on first contribution
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import (
    ActivityType, CollectiveId, MemberRole, TransactionGroup, TransactionKind,
    TransactionType, UserId,
)
from fundhost.core.errors import ConflictError, ErrorContext, ValidationError
from fundhost.core.permissions import RemoteUser
from fundhost.models.collective import Collective
from fundhost.models.member import Member
from fundhost.models.transaction import Transaction
from fundhost.services import transaction_settlements
from fundhost.services.activities import record_activity

logger = logging.getLogger(__name__)


def _pair(
    kind: TransactionKind,
    group: TransactionGroup,
    credit_account_id: CollectiveId,
    debit_account_id: CollectiveId,
    amount: int,
    currency: str,
    host_id: CollectiveId | None,
    description: str,
    is_debt: bool = False,
    user_id: UserId | None = None,
) -> tuple[Transaction, Transaction]:
    common = dict(
        kind=kind.value, transaction_group=group, currency=currency,
        host_collective_id=host_id, description=description, is_debt=is_debt,
        created_by_user_id=user_id,
    )
    credit = Transaction(
        type=TransactionType.CREDIT.value, amount=amount,
        collective_id=credit_account_id, from_collective_id=debit_account_id,
        **common,
    )
    debit = Transaction(
        type=TransactionType.DEBIT.value, amount=-amount,
        collective_id=debit_account_id, from_collective_id=credit_account_id,
        **common,
    )
    return credit, debit


async def record_contribution(
    db: AsyncSession,
    from_account: Collective,
    to_account: Collective,
    amount: int,
    platform_tip: int = 0,
    platform: Collective | None = None,
    currency: str | None = None,
    description: str | None = None,
    user: RemoteUser | None = None,
) -> list[Transaction]:
    """Record a contribution (and optional platform tip) from one account to another."""
    if amount <= 0:
        raise ValidationError("Contribution amount must be positive", field="amount")
    if platform_tip < 0:
        raise ValidationError("Platform tip cannot be negative", field="platform_tip")
    if platform_tip and platform is None:
        raise ValidationError("A platform account is required to record a tip", field="platform")
    host_id = to_account.host_collective_id
    if host_id is None:
        raise ValidationError(
            f"{to_account.name} has no fiscal host",
            field="to_account",
            context=ErrorContext(collective_id=to_account.id),
        )

    group = TransactionGroup(uuid.uuid4())
    currency = currency or to_account.currency
    user_id = user.id if user else None
    description = description or f"Contribution to {to_account.name}"

    rows = list(_pair(
        TransactionKind.CONTRIBUTION, group, to_account.id, from_account.id,
        amount, currency, host_id, description, user_id=user_id,
    ))
    debt_credit = None
    if platform_tip:
        rows.extend(_pair(
            TransactionKind.PLATFORM_TIP, group, platform.id, from_account.id,
            platform_tip, currency, host_id, "Platform tip", user_id=user_id,
        ))
        debt_credit, debt_debit = _pair(
            TransactionKind.PLATFORM_TIP_DEBT, group, host_id, platform.id,
            platform_tip, currency, host_id, "Platform tip collected by host",
            is_debt=True, user_id=user_id,
        )
        rows.extend((debt_credit, debt_debit))

    db.add_all(rows)
    await db.flush()
    if debt_credit is not None:
        await transaction_settlements.create_for_transaction(db, debt_credit)
    await _ensure_backer(db, from_account, to_account, user_id)

    record_activity(
        db, ActivityType.TRANSACTION_CREATED,
        collective_id=to_account.id, user_id=user_id, transaction_id=rows[0].id,
        data={
            "transaction_group": str(group), "amount": amount,
            "platform_tip": platform_tip, "currency": currency,
        },
    )
    await db.flush()
    logger.info(
        f"Contribution of {amount} {currency} recorded",
        extra={"collective_id": to_account.id, "transaction_group": group},
    )
    return rows


async def _ensure_backer(
    db: AsyncSession, from_account: Collective, to_account: Collective, user_id: UserId | None,
) -> None:
    result = await db.execute(
        select(Member.id)
        .where(Member.collective_id == to_account.id)
        .where(Member.member_collective_id == from_account.id)
        .where(Member.role == MemberRole.BACKER.value)
        .where(Member.deleted_at.is_(None))
        .limit(1),
    )
    if result.scalar_one_or_none() is None:
        db.add(Member(
            collective_id=to_account.id,
            member_collective_id=from_account.id,
            role=MemberRole.BACKER.value,
            created_by_user_id=user_id,
        ))


async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction | None:
    transaction = await db.get(Transaction, transaction_id)
    if transaction is None or transaction.is_deleted:
        return None
    return transaction


async def list_account_transactions(
    db: AsyncSession, collective_id: CollectiveId, limit: int = 50,
) -> list[Transaction]:
    """Latest live transactions of an account, debts carrying their settlement status."""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.collective_id == collective_id)
        .where(Transaction.deleted_at.is_(None))
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit),
    )
    transactions = list(result.scalars().all())
    await transaction_settlements.attach_statuses_to_transactions(db, transactions)
    return transactions


def _flip(transaction_type: str) -> str:
    if transaction_type == TransactionType.CREDIT.value:
        return TransactionType.DEBIT.value
    return TransactionType.CREDIT.value


async def refund_transaction(
    db: AsyncSession, transaction: Transaction, user: RemoteUser | None = None,
) -> list[Transaction]:
    """Refund the whole group of a transaction; returns the refund rows."""
    context = ErrorContext(
        transaction_group=str(transaction.transaction_group),
        user_id=user.id if user else None,
    )
    if transaction.is_refund:
        raise ValidationError("A refund cannot be refunded", field="transaction", context=context)
    if transaction.refund_transaction_id is not None:
        raise ConflictError("This transaction has already been refunded", context)

    result = await db.execute(
        select(Transaction)
        .where(Transaction.transaction_group == transaction.transaction_group)
        .where(Transaction.deleted_at.is_(None))
        .where(Transaction.is_refund.is_(False))
        .where(Transaction.refund_transaction_id.is_(None))
        .order_by(Transaction.id),
    )
    originals = list(result.scalars().all())

    refund_group = TransactionGroup(uuid.uuid4())
    refunds = [
        Transaction(
            type=_flip(original.type),
            kind=original.kind,
            transaction_group=refund_group,
            description=f"Refund of \"{original.description or original.kind}\"",
            amount=-original.amount,
            currency=original.currency,
            collective_id=original.collective_id,
            from_collective_id=original.from_collective_id,
            host_collective_id=original.host_collective_id,
            expense_id=original.expense_id,
            is_debt=original.is_debt,
            is_refund=True,
            refund_transaction_id=original.id,
            created_by_user_id=user.id if user else None,
        )
        for original in originals
    ]
    db.add_all(refunds)
    await db.flush()
    for original, refund in zip(originals, refunds):
        original.refund_transaction_id = refund.id

    await _revert_debt_settlements(db, originals, refunds)

    record_activity(
        db, ActivityType.TRANSACTION_REFUNDED,
        collective_id=transaction.collective_id,
        user_id=user.id if user else None,
        transaction_id=transaction.id,
        data={
            "transaction_group": str(transaction.transaction_group),
            "refund_group": str(refund_group),
            "rows": len(refunds),
        },
    )
    await db.flush()
    logger.info(
        f"Refunded {len(originals)} transactions",
        extra={"transaction_group": transaction.transaction_group},
    )
    return refunds


async def _revert_debt_settlements(
    db: AsyncSession, originals: list[Transaction], refunds: list[Transaction],
) -> None:
    debt_kinds = sorted({o.kind for o in originals if o.is_debt})
    for kind in debt_kinds:
        group = next(o.transaction_group for o in originals if o.kind == kind)
        settlement = await transaction_settlements.find_settlement(db, group, kind)
        if settlement is None:
            logger.warning(
                f"No settlement to revert for {kind}",
                extra={"transaction_group": group},
            )
            continue
        of_kind = [r for r in refunds if r.kind == kind]
        refund_credit = next(
            (r for r in of_kind if r.type == TransactionType.CREDIT.value),
            of_kind[0],
        )
        await transaction_settlements.revert_settlement_for_refund(
            db, settlement, refund_credit,
        )
