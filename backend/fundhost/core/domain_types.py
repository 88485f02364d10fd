"""Domain Types — enums and identity types shared by models, services and GraphQL.

Invariants:
    - All valid states encoded as Enums — no raw string matching in services
    - Enum values are the strings persisted in the database columns
    - TransactionSettlement.kind reuses TransactionKind (one value set for both tables)

Design Decisions:
    - str Enums stored in String columns, not native DB enums: portable between
      PostgreSQL and the SQLite test database (ADR: migrations stay simple)
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

CollectiveId = NewType("CollectiveId", int)
UserId = NewType("UserId", int)
TransactionGroup = NewType("TransactionGroup", UUID)


# ─── Accounts ────────────────────────────────────────────────────

class CollectiveType(str, Enum):
    """Account types. Profile pages exist for USER and ORGANIZATION only."""
    USER = "USER"
    ORGANIZATION = "ORGANIZATION"
    COLLECTIVE = "COLLECTIVE"
    EVENT = "EVENT"
    FUND = "FUND"


class MemberRole(str, Enum):
    """Role of a member account inside a collective."""
    HOST = "HOST"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    ACCOUNTANT = "ACCOUNTANT"
    BACKER = "BACKER"
    FOLLOWER = "FOLLOWER"
    CONTRIBUTOR = "CONTRIBUTOR"


# Roles an admin may invite or remove through the member mutations
MANAGEABLE_MEMBER_ROLES = frozenset({
    MemberRole.ACCOUNTANT, MemberRole.ADMIN, MemberRole.MEMBER,
})


# ─── Ledger ──────────────────────────────────────────────────────

class TransactionType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionKind(str, Enum):
    """What a transaction pair records."""
    CONTRIBUTION = "CONTRIBUTION"
    EXPENSE = "EXPENSE"
    ADDED_FUNDS = "ADDED_FUNDS"
    PLATFORM_TIP = "PLATFORM_TIP"
    PLATFORM_TIP_DEBT = "PLATFORM_TIP_DEBT"
    HOST_FEE = "HOST_FEE"
    HOST_FEE_SHARE = "HOST_FEE_SHARE"
    HOST_FEE_SHARE_DEBT = "HOST_FEE_SHARE_DEBT"


class TransactionSettlementStatus(str, Enum):
    """Settlement lifecycle of a debt: OWED -> INVOICED -> SETTLED."""
    OWED = "OWED"
    INVOICED = "INVOICED"
    SETTLED = "SETTLED"


class ExpenseType(str, Enum):
    INVOICE = "INVOICE"
    RECEIPT = "RECEIPT"
    SETTLEMENT = "SETTLEMENT"


class ExpenseStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    PAID = "PAID"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class ActivityType(str, Enum):
    """Audit trail entries written by services."""
    MEMBER_INVITED = "collective.member.invited"
    MEMBER_REMOVED = "collective.member.removed"
    MEMBER_CREATED = "collective.member.created"
    INVITATION_DECLINED = "collective.member.invitation.declined"
    TRANSACTION_CREATED = "collective.transaction.created"
    TRANSACTION_REFUNDED = "collective.transaction.refunded"
    SETTLEMENT_INVOICED = "host.settlement.invoiced"
    SETTLEMENT_PAID = "host.settlement.paid"
