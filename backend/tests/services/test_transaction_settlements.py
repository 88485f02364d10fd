"""Transaction Settlements — status tracking, debt queries and refund reverts.

Tests:
    - Status updates match settlements by (transaction_group, kind) and skip empty input
    - Statuses are attached to debt transactions only
    - Host debts are filtered by host and status
    - Refund revert per status: OWED dropped, INVOICED removed from invoice,
      SETTLED (or paid invoice) re-created as OWED for the refund
    - An invoice that lost the debt's item leaves the settlement untouched and raises
    - Unknown statuses and invoices gone missing raise SettlementStateError
"""

import uuid

import pytest

from fundhost.core.domain_types import ExpenseStatus, TransactionSettlementStatus
from fundhost.core.errors import SettlementStateError
from fundhost.models.transaction import Transaction
from fundhost.models.transaction_settlement import TransactionSettlement
from fundhost.services import transaction_settlements
from fundhost.services.host_settlement import invoice_host_debts, mark_invoice_settled
from fundhost.services.transactions import record_contribution, refund_transaction


async def _status(db, transaction):
    settlement = await transaction_settlements.find_settlement(
        db, transaction.transaction_group, transaction.kind,
    )
    return settlement.status if settlement else None


# --- Updates ------------------------------------------------------------------

async def test_update_with_no_transactions_is_noop(test_db):
    assert await transaction_settlements.update_transactions_settlement_status(
        test_db, [], TransactionSettlementStatus.SETTLED,
    ) == 0


async def test_update_sets_status(test_db, debt_credit):
    count = await transaction_settlements.update_transactions_settlement_status(
        test_db, [debt_credit], TransactionSettlementStatus.SETTLED,
    )
    assert count == 1
    assert await _status(test_db, debt_credit) == "SETTLED"


async def test_update_leaves_expense_id_when_not_given(test_db, debt_credit):
    await transaction_settlements.update_transactions_settlement_status(
        test_db, [debt_credit], TransactionSettlementStatus.INVOICED,
    )
    refreshed = await transaction_settlements.find_settlement(
        test_db, debt_credit.transaction_group, debt_credit.kind,
    )
    assert refreshed.status == "INVOICED"
    assert refreshed.expense_id is None


async def test_attach_statuses_skips_non_debts(test_db, tipped_contribution):
    await transaction_settlements.attach_statuses_to_transactions(test_db, tipped_contribution)
    for transaction in tipped_contribution:
        if transaction.is_debt and transaction.type == "CREDIT":
            assert transaction.settlement_status == "OWED"
        elif not transaction.is_debt:
            assert transaction.settlement_status is None


# --- Queries ------------------------------------------------------------------

async def test_accounts_with_owed_settlements(test_db, tipped_contribution, ledger):
    accounts = await transaction_settlements.get_accounts_with_owed_settlements(test_db)
    assert [a.id for a in accounts] == [ledger.host.id]


async def test_host_debts_filtered_by_host(test_db, tipped_contribution, ledger):
    debts = await transaction_settlements.get_host_debts(test_db, ledger.host.id)
    assert len(debts) == 1
    assert debts[0].settlement_status == "OWED"
    assert await transaction_settlements.get_host_debts(test_db, ledger.collective.id) == []


async def test_host_debts_filtered_by_status(test_db, tipped_contribution, ledger):
    assert await transaction_settlements.get_host_debts(
        test_db, ledger.host.id, TransactionSettlementStatus.SETTLED,
    ) == []
    owed = await transaction_settlements.get_host_debts(
        test_db, ledger.host.id, TransactionSettlementStatus.OWED,
    )
    assert len(owed) == 1


async def test_host_debts_ignore_deleted_settlements(test_db, debt_credit, ledger):
    settlement = await transaction_settlements.find_settlement(
        test_db, debt_credit.transaction_group, debt_credit.kind,
    )
    settlement.soft_delete()
    await test_db.flush()
    assert await transaction_settlements.get_host_debts(test_db, ledger.host.id) == []


# --- Refund reverts -----------------------------------------------------------

async def test_refund_of_invoiced_debt_cancels_single_item_invoice(
    test_db, tipped_contribution, debt_credit, ledger,
):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    await test_db.commit()

    await refund_transaction(test_db, tipped_contribution[0])
    await test_db.commit()

    assert invoice.items == []
    assert invoice.amount == 0
    assert invoice.status == ExpenseStatus.CANCELED.value
    assert await _status(test_db, debt_credit) is None


async def test_refund_of_invoiced_debt_shrinks_invoice(test_db, tipped_contribution, ledger):
    await record_contribution(
        test_db, ledger.backer_profile, ledger.collective, 2000,
        platform_tip=300, platform=ledger.platform,
    )
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    await test_db.commit()
    assert invoice.amount == 450

    await refund_transaction(test_db, tipped_contribution[0])
    await test_db.commit()

    assert invoice.amount == 300
    assert len(invoice.items) == 1
    assert invoice.status == ExpenseStatus.PENDING.value


async def test_refund_of_settled_debt_owes_it_back(test_db, tipped_contribution, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    await mark_invoice_settled(test_db, invoice)
    await test_db.commit()

    refunds = await refund_transaction(test_db, tipped_contribution[0])
    await test_db.commit()

    refund_debt = next(r for r in refunds if r.is_debt and r.type == "CREDIT")
    assert refund_debt.collective_id == ledger.platform.id
    assert await _status(test_db, refund_debt) == "OWED"


async def test_refund_after_invoice_paid_owes_it_back(test_db, tipped_contribution, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    invoice.status = ExpenseStatus.PAID.value
    await test_db.commit()

    refunds = await refund_transaction(test_db, tipped_contribution[0])
    refund_debt = next(r for r in refunds if r.is_debt and r.type == "CREDIT")
    assert await _status(test_db, refund_debt) == "OWED"
    assert len(invoice.items) == 1


async def test_revert_unknown_status_raises(test_db):
    settlement = TransactionSettlement(
        transaction_group=uuid.uuid4(), kind="PLATFORM_TIP_DEBT", status="LOST",
    )
    with pytest.raises(SettlementStateError, match="Don't know how to revert this status: LOST"):
        await transaction_settlements.revert_settlement_for_refund(
            test_db, settlement, Transaction(),
        )


async def test_revert_invoiced_without_invoice_raises(test_db):
    settlement = TransactionSettlement(
        transaction_group=uuid.uuid4(), kind="PLATFORM_TIP_DEBT", status="INVOICED",
    )
    with pytest.raises(SettlementStateError, match="Invoiced settlement has no invoice"):
        await transaction_settlements.revert_settlement_for_refund(
            test_db, settlement, Transaction(),
        )


async def test_revert_invoiced_without_matching_item_raises(
    test_db, tipped_contribution, debt_credit, ledger,
):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    invoice.items.clear()
    await test_db.flush()
    settlement = await transaction_settlements.find_settlement(
        test_db, debt_credit.transaction_group, debt_credit.kind,
    )

    with pytest.raises(SettlementStateError, match=f"Invoice {invoice.id} has no item for this debt"):
        await transaction_settlements.revert_settlement_for_refund(
            test_db, settlement, debt_credit,
        )

    assert settlement.deleted_at is None
    assert settlement.status == "INVOICED"
    assert invoice.amount == 150
