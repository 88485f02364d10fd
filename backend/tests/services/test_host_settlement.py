"""Host Settlement — invoicing owed debts and settling the invoices.

Tests:
    - An invoice is a SETTLEMENT expense from the platform to the host, one item per debt
    - Invoiced debts move to INVOICED and point at the invoice; a second run finds nothing
    - Debts in another currency than the host's stay OWED
    - Paying an invoice settles its debts; paying twice or paying a non-settlement fails
    - run_host_settlement summarizes each debtor, and dry_run writes nothing
    - dry_run reports only what would be invoiced (host currency)
    - A host that fails is rolled back and logged; the other hosts are still invoiced
"""

import pytest
from sqlalchemy import select

from fundhost.core.domain_types import (
    ActivityType, CollectiveType, ExpenseStatus, ExpenseType, TransactionSettlementStatus,
)
from fundhost.core.errors import (
    ConflictError, ResourceNotFoundError, SettlementStateError, ValidationError,
)
from fundhost.models.activity import Activity
from fundhost.models.expense import Expense
from fundhost.services import host_settlement, transaction_settlements
from fundhost.services.host_settlement import (
    invoice_host_debts, mark_invoice_settled, run_host_settlement,
)
from fundhost.services.transactions import record_contribution

PLATFORM_TIP = 150  # tipped_contribution


async def _settlement(db, transaction):
    return await transaction_settlements.find_settlement(
        db, transaction.transaction_group, transaction.kind,
    )


# --- invoice_host_debts -------------------------------------------------------

async def test_invoice_is_paid_by_host_to_platform(test_db, debt_credit, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)

    assert invoice.type == ExpenseType.SETTLEMENT.value
    assert invoice.status == ExpenseStatus.PENDING.value
    assert invoice.collective_id == ledger.host.id
    assert invoice.from_collective_id == ledger.platform.id
    assert invoice.currency == "USD"
    assert invoice.amount == PLATFORM_TIP
    assert len(invoice.items) == 1
    item = invoice.items[0]
    assert item.transaction_group == debt_credit.transaction_group
    assert item.transaction_kind == "PLATFORM_TIP_DEBT"


async def test_invoiced_debts_point_at_invoice(test_db, debt_credit, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    settlement = await _settlement(test_db, debt_credit)
    assert settlement.status == TransactionSettlementStatus.INVOICED.value
    assert settlement.expense_id == invoice.id


async def test_nothing_owed_returns_none(test_db, tipped_contribution, ledger):
    assert await invoice_host_debts(test_db, ledger.host, ledger.platform) is not None
    assert await invoice_host_debts(test_db, ledger.host, ledger.platform) is None


async def test_debts_in_other_currency_stay_owed(test_db, ledger, make_account):
    euro_collective = await make_account(
        "euro-fund", currency="EUR", host_collective_id=ledger.host.id,
    )
    rows = await record_contribution(
        test_db, ledger.backer_profile, euro_collective, 1000,
        platform_tip=100, platform=ledger.platform,
    )
    debt = next(t for t in rows if t.is_debt and t.type == "CREDIT")

    assert await invoice_host_debts(test_db, ledger.host, ledger.platform) is None
    settlement = await _settlement(test_db, debt)
    assert settlement.status == TransactionSettlementStatus.OWED.value


async def test_invoice_records_activity(test_db, tipped_contribution, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    result = await test_db.execute(
        select(Activity).where(Activity.type == ActivityType.SETTLEMENT_INVOICED.value),
    )
    activity = result.scalar_one()
    assert activity.collective_id == ledger.host.id
    assert activity.data["expense_id"] == invoice.id


# --- mark_invoice_settled -----------------------------------------------------

async def test_paying_invoice_settles_debts(test_db, debt_credit, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    settled = await mark_invoice_settled(test_db, invoice)

    assert settled == 1
    assert invoice.status == ExpenseStatus.PAID.value
    settlement = await _settlement(test_db, debt_credit)
    assert settlement.status == TransactionSettlementStatus.SETTLED.value


async def test_paying_twice_conflicts(test_db, tipped_contribution, ledger):
    invoice = await invoice_host_debts(test_db, ledger.host, ledger.platform)
    await mark_invoice_settled(test_db, invoice)
    with pytest.raises(ConflictError, match="already PAID"):
        await mark_invoice_settled(test_db, invoice)


async def test_only_settlement_expenses_settle(test_db, ledger):
    expense = Expense(
        collective_id=ledger.collective.id,
        from_collective_id=ledger.backer_profile.id,
        type=ExpenseType.INVOICE.value,
        description="Stickers",
        amount=2500,
    )
    test_db.add(expense)
    await test_db.flush()
    with pytest.raises(ValidationError) as exc_info:
        await mark_invoice_settled(test_db, expense)
    assert exc_info.value.context.collective_id == ledger.collective.id
    assert expense.status == ExpenseStatus.PENDING.value


# --- run_host_settlement ------------------------------------------------------

async def test_run_invoices_each_debtor(test_db, tipped_contribution, ledger):
    summaries = await run_host_settlement(test_db, "platform")

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary["host"] == "host"
    assert summary["debts"] == 1
    assert summary["amount"] == PLATFORM_TIP
    invoice = await test_db.get(Expense, summary["expense_id"])
    assert invoice.type == ExpenseType.SETTLEMENT.value


async def test_run_twice_invoices_once(test_db, tipped_contribution, ledger):
    await run_host_settlement(test_db, "platform")
    assert await run_host_settlement(test_db, "platform") == []


async def test_dry_run_writes_nothing(test_db, debt_credit, ledger):
    summaries = await run_host_settlement(test_db, "platform", dry_run=True)

    assert summaries == [{
        "host": "host", "debts": 1, "amount": PLATFORM_TIP, "expense_id": None,
    }]
    expenses = await test_db.execute(select(Expense))
    assert expenses.scalars().all() == []
    settlement = await _settlement(test_db, debt_credit)
    assert settlement.status == TransactionSettlementStatus.OWED.value


async def test_run_with_unknown_platform(test_db, ledger):
    with pytest.raises(ResourceNotFoundError):
        await run_host_settlement(test_db, "nowhere")


async def test_dry_run_skips_other_currencies(test_db, debt_credit, ledger, make_account):
    euro_collective = await make_account(
        "euro-fund", currency="EUR", host_collective_id=ledger.host.id,
    )
    await record_contribution(
        test_db, ledger.backer_profile, euro_collective, 1000,
        platform_tip=100, platform=ledger.platform,
    )
    await test_db.commit()

    summaries = await run_host_settlement(test_db, "platform", dry_run=True)

    assert summaries == [{
        "host": "host", "debts": 1, "amount": PLATFORM_TIP, "expense_id": None,
    }]


async def test_failing_host_does_not_stop_the_run(
    test_db, tipped_contribution, ledger, make_account, monkeypatch,
):
    other_host = await make_account("other-host", CollectiveType.ORGANIZATION, currency="USD")
    other_host.host_collective_id = other_host.id
    other_collective = await make_account("babel", host_collective_id=other_host.id)
    await record_contribution(
        test_db, ledger.backer_profile, other_collective, 2000,
        platform_tip=200, platform=ledger.platform,
    )
    await test_db.commit()
    failing_host_id = ledger.host.id

    async def invoice_or_fail(db, host, platform):
        if host.id == failing_host_id:
            raise SettlementStateError("Invoice rejected")
        return await invoice_host_debts(db, host, platform)

    monkeypatch.setattr(host_settlement, "invoice_host_debts", invoice_or_fail)

    summaries = await run_host_settlement(test_db, "platform")

    assert [(s["host"], s["amount"]) for s in summaries] == [("other-host", 200)]
    owed = await transaction_settlements.get_host_debts(
        test_db, failing_host_id, TransactionSettlementStatus.OWED,
    )
    assert len(owed) == 1
