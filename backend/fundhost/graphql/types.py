"""GraphQL Types — Strawberry enums, inputs and object types of the public API.

Invariants:
    - Object types are built from ORM rows with from_model(); they hold ids, never sessions
    - Relations are resolved on demand through info.context["db"] (no lazy loads)
    - Deleted rows are never reachable through a relation resolver

Design Decisions:
    - Core str Enums are registered as GraphQL enums as-is: one source of truth for values
    - Account ids are exposed as legacyId too, so callers can feed them back into
      AccountReferenceInput
"""

from datetime import datetime

import strawberry

from fundhost.core.domain_types import (
    CollectiveType, ExpenseStatus, ExpenseType, MemberRole,
    TransactionKind, TransactionSettlementStatus, TransactionType,
)
from fundhost.graphql.context import get_db_session
from fundhost.models.collective import Collective as CollectiveModel
from fundhost.models.expense import Expense as ExpenseModel
from fundhost.models.member import Member as MemberModel
from fundhost.models.member_invitation import MemberInvitation as MemberInvitationModel
from fundhost.models.tier import Tier as TierModel
from fundhost.models.transaction import Transaction as TransactionModel
from fundhost.services import accounts, members as members_service
from fundhost.services import transactions as transactions_service

# ─── Enums ───────────────────────────────────────────────────────

for _enum, _name in (
    (CollectiveType, "AccountType"),
    (MemberRole, "MemberRole"),
    (TransactionType, "TransactionType"),
    (TransactionKind, "TransactionKind"),
    (TransactionSettlementStatus, "TransactionSettlementStatus"),
    (ExpenseType, "ExpenseType"),
    (ExpenseStatus, "ExpenseStatus"),
):
    strawberry.enum(_enum, name=_name)


# ─── Inputs ──────────────────────────────────────────────────────

@strawberry.input(description="Reference to an account by legacyId or slug")
class AccountReferenceInput:
    legacy_id: int | None = None
    slug: str | None = None

    def to_dict(self) -> dict:
        return {"legacy_id": self.legacy_id, "slug": self.slug}


@strawberry.input
class MemberInvitationInput:
    member_account: AccountReferenceInput
    account: AccountReferenceInput
    role: MemberRole
    description: str | None = None
    since: datetime | None = None


@strawberry.input
class MemberInvitationReferenceInput:
    id: int


@strawberry.input
class TransactionReferenceInput:
    id: int


@strawberry.input
class ExpenseReferenceInput:
    id: int


# ─── Object types ────────────────────────────────────────────────

async def _account_or_none(info: strawberry.Info, account_id: int | None) -> "Account | None":
    if account_id is None:
        return None
    collective = await accounts.get_account_by_id(get_db_session(info), account_id)
    return Account.from_model(collective) if collective else None


@strawberry.type
class Tier:
    id: int
    name: str
    description: str | None
    amount: int | None
    currency: str
    interval: str | None

    @classmethod
    def from_model(cls, tier: TierModel) -> "Tier":
        return cls(
            id=tier.id, name=tier.name, description=tier.description,
            amount=tier.amount, currency=tier.currency, interval=tier.interval,
        )


@strawberry.type
class Member:
    id: int
    role: MemberRole
    description: str | None
    public_message: str | None
    since: datetime | None
    created_at: datetime
    collective_id: strawberry.Private[int]
    member_collective_id: strawberry.Private[int]

    @classmethod
    def from_model(cls, member: MemberModel) -> "Member":
        return cls(
            id=member.id,
            role=MemberRole(member.role),
            description=member.description,
            public_message=member.public_message,
            since=member.since,
            created_at=member.created_at,
            collective_id=member.collective_id,
            member_collective_id=member.member_collective_id,
        )

    @strawberry.field(description="The account this membership belongs to")
    async def account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.collective_id)

    @strawberry.field(description="The account holding the membership")
    async def member_account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.member_collective_id)


@strawberry.type
class MemberInvitation:
    id: int
    role: MemberRole
    description: str | None
    since: datetime | None
    created_at: datetime
    collective_id: strawberry.Private[int]
    member_collective_id: strawberry.Private[int]

    @classmethod
    def from_model(cls, invitation: MemberInvitationModel) -> "MemberInvitation":
        return cls(
            id=invitation.id,
            role=MemberRole(invitation.role),
            description=invitation.description,
            since=invitation.since,
            created_at=invitation.created_at,
            collective_id=invitation.collective_id,
            member_collective_id=invitation.member_collective_id,
        )

    @strawberry.field
    async def account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.collective_id)

    @strawberry.field
    async def member_account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.member_collective_id)


@strawberry.type
class Transaction:
    id: int
    type: TransactionType
    kind: TransactionKind
    transaction_group: str
    description: str | None
    amount: int
    currency: str
    is_debt: bool
    is_refund: bool
    refund_transaction_id: int | None
    settlement_status: TransactionSettlementStatus | None
    created_at: datetime
    collective_id: strawberry.Private[int]
    from_collective_id: strawberry.Private[int]
    host_collective_id: strawberry.Private[int | None]

    @classmethod
    def from_model(cls, transaction: TransactionModel) -> "Transaction":
        status = transaction.settlement_status
        return cls(
            id=transaction.id,
            type=TransactionType(transaction.type),
            kind=TransactionKind(transaction.kind),
            transaction_group=str(transaction.transaction_group),
            description=transaction.description,
            amount=transaction.amount,
            currency=transaction.currency,
            is_debt=transaction.is_debt,
            is_refund=transaction.is_refund,
            refund_transaction_id=transaction.refund_transaction_id,
            settlement_status=TransactionSettlementStatus(status) if status else None,
            created_at=transaction.created_at,
            collective_id=transaction.collective_id,
            from_collective_id=transaction.from_collective_id,
            host_collective_id=transaction.host_collective_id,
        )

    @strawberry.field
    async def account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.collective_id)

    @strawberry.field
    async def from_account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.from_collective_id)

    @strawberry.field
    async def host(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.host_collective_id)


@strawberry.type
class ExpenseItem:
    id: int
    amount: int
    description: str | None
    transaction_group: str | None
    transaction_kind: TransactionKind | None


@strawberry.type
class Expense:
    id: int
    type: ExpenseType
    status: ExpenseStatus
    description: str
    amount: int
    currency: str
    created_at: datetime
    items: list[ExpenseItem]
    collective_id: strawberry.Private[int]
    from_collective_id: strawberry.Private[int]

    @classmethod
    def from_model(cls, expense: ExpenseModel) -> "Expense":
        return cls(
            id=expense.id,
            type=ExpenseType(expense.type),
            status=ExpenseStatus(expense.status),
            description=expense.description,
            amount=expense.amount,
            currency=expense.currency,
            created_at=expense.created_at,
            items=[
                ExpenseItem(
                    id=item.id,
                    amount=item.amount,
                    description=item.description,
                    transaction_group=str(item.transaction_group) if item.transaction_group else None,
                    transaction_kind=(
                        TransactionKind(item.transaction_kind) if item.transaction_kind else None
                    ),
                )
                for item in expense.items
            ],
            collective_id=expense.collective_id,
            from_collective_id=expense.from_collective_id,
        )

    @strawberry.field(description="The account paying the expense")
    async def account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.collective_id)

    @strawberry.field(description="The account being paid")
    async def payee(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.from_collective_id)


@strawberry.type
class AccountStats:
    balance: int
    collectives_hosted: int


@strawberry.type
class Account:
    id: int
    legacy_id: int
    slug: str
    name: str
    type: CollectiveType
    description: str | None
    long_description: str | None
    image: str | None
    twitter_handle: str | None
    currency: str
    can_apply: bool
    created_at: datetime
    parent_collective_id: strawberry.Private[int | None]
    host_collective_id: strawberry.Private[int | None]

    @classmethod
    def from_model(cls, collective: CollectiveModel) -> "Account":
        return cls(
            id=collective.id,
            legacy_id=collective.id,
            slug=collective.slug,
            name=collective.name,
            type=CollectiveType(collective.type),
            description=collective.description,
            long_description=collective.long_description,
            image=collective.image,
            twitter_handle=collective.twitter_handle,
            currency=collective.currency,
            can_apply=bool(collective.can_apply),
            created_at=collective.created_at,
            parent_collective_id=collective.parent_collective_id,
            host_collective_id=collective.host_collective_id,
        )

    @strawberry.field
    async def parent_account(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.parent_collective_id)

    @strawberry.field
    async def host(self, info: strawberry.Info) -> "Account | None":
        return await _account_or_none(info, self.host_collective_id)

    @strawberry.field(description="Members of this account")
    async def members(
        self, info: strawberry.Info, role: MemberRole | None = None,
    ) -> list[Member]:
        rows = await members_service.list_members(get_db_session(info), self.id, role)
        return [Member.from_model(m) for m in rows]

    @strawberry.field(description="Memberships this account holds in other accounts")
    async def member_of(
        self, info: strawberry.Info, role: MemberRole | None = None,
    ) -> list[Member]:
        rows = await members_service.list_memberships(get_db_session(info), self.id, role)
        return [Member.from_model(member) for member, _ in rows]

    @strawberry.field
    async def tiers(self, info: strawberry.Info) -> list[Tier]:
        rows = await accounts.list_tiers(get_db_session(info), self.id)
        return [Tier.from_model(t) for t in rows]

    @strawberry.field
    async def stats(self, info: strawberry.Info) -> AccountStats:
        db = get_db_session(info)
        return AccountStats(
            balance=await accounts.get_balance(db, self.id),
            collectives_hosted=await accounts.count_hosted_collectives(db, self.id),
        )

    @strawberry.field(description="Latest transactions of this account")
    async def transactions(self, info: strawberry.Info, limit: int = 50) -> list[Transaction]:
        rows = await transactions_service.list_account_transactions(
            get_db_session(info), self.id, limit=min(max(limit, 1), 100),
        )
        return [Transaction.from_model(t) for t in rows]
