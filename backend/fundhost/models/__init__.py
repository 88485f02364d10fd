"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Collective is the account table; members, transactions and expenses reference it

Design Decisions:
    - One file per entity for locality (Expense and ExpenseItem share a file: items never stand alone)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from fundhost.models.collective import Collective  # noqa: F401
from fundhost.models.user import User  # noqa: F401
from fundhost.models.tier import Tier  # noqa: F401
from fundhost.models.member import Member  # noqa: F401
from fundhost.models.member_invitation import MemberInvitation  # noqa: F401
from fundhost.models.expense import Expense, ExpenseItem  # noqa: F401
from fundhost.models.transaction import Transaction  # noqa: F401
from fundhost.models.transaction_settlement import TransactionSettlement  # noqa: F401
from fundhost.models.activity import Activity  # noqa: F401
