"""Service test fixtures — ledger rows recorded through the transactions service.

Invariants:
    - tipped_contribution is committed before the test runs, like a finished request
    - Amounts are cents: a 10.00 contribution with a 1.50 platform tip
"""

import pytest

from fundhost.services.transactions import record_contribution

CONTRIBUTION_AMOUNT = 1000
PLATFORM_TIP = 150


@pytest.fixture
async def tipped_contribution(test_db, ledger):
    """A backer contribution to the hosted collective with a platform tip."""
    rows = await record_contribution(
        test_db, ledger.backer_profile, ledger.collective, CONTRIBUTION_AMOUNT,
        platform_tip=PLATFORM_TIP, platform=ledger.platform,
    )
    await test_db.commit()
    return rows


@pytest.fixture
def debt_credit(tipped_contribution):
    """The CREDIT debt row carried by the host."""
    return next(t for t in tipped_contribution if t.is_debt and t.type == "CREDIT")
