"""GraphQL Mutations — memberships, invitations, refunds and settlement payments.

Invariants:
    - Every mutation requires a logged-in user except editPublicMessage, which
      answers Forbidden for anonymous callers
    - Member services commit themselves; ledger mutations commit here, after the
      service has flushed every row of the operation
"""

import logging

import strawberry

from fundhost.config import get_settings
from fundhost.core.domain_types import MemberRole
from fundhost.core.errors import ErrorContext, Forbidden, ResourceNotFoundError
from fundhost.core.permissions import require_login
from fundhost.graphql.context import get_db_session, get_remote_user
from fundhost.graphql.types import (
    AccountReferenceInput, Expense, ExpenseReferenceInput, Member, MemberInvitation,
    MemberInvitationInput, MemberInvitationReferenceInput, Transaction,
    TransactionReferenceInput,
)
from fundhost.models.expense import Expense as ExpenseModel
from fundhost.services import (
    accounts, host_settlement, member_invitations, members, transactions,
)

logger = logging.getLogger(__name__)


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Edit the public message of a membership")
    async def edit_public_message(
        self,
        info: strawberry.Info,
        from_account: AccountReferenceInput,
        to_account: AccountReferenceInput,
        message: str | None = None,
    ) -> Member:
        db = get_db_session(info)
        member_account = await accounts.fetch_account_with_reference(db, from_account.to_dict())
        account = await accounts.fetch_account_with_reference(db, to_account.to_dict())
        member = await members.edit_public_message(
            db, get_remote_user(info), member_account, account, message,
        )
        return Member.from_model(member)

    @strawberry.mutation(description="Invite an account to join another account")
    async def invite_member(
        self, info: strawberry.Info, member_invitation: MemberInvitationInput,
    ) -> MemberInvitation:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to invite a member.",
        )
        db = get_db_session(info)
        member_account = await accounts.fetch_account_with_reference(
            db, member_invitation.member_account.to_dict(),
        )
        account = await accounts.fetch_account_with_reference(
            db, member_invitation.account.to_dict(),
        )
        invitation = await member_invitations.invite_member(
            db, remote_user, member_account, account,
            role=member_invitation.role,
            description=member_invitation.description,
            since=member_invitation.since,
        )
        return MemberInvitation.from_model(invitation)

    @strawberry.mutation(description="Remove a member from an account")
    async def remove_member(
        self,
        info: strawberry.Info,
        member_account: AccountReferenceInput,
        account: AccountReferenceInput,
        role: MemberRole | None = None,
    ) -> bool:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to remove a member.",
        )
        db = get_db_session(info)
        member = await accounts.fetch_account_with_reference(db, member_account.to_dict())
        collective = await accounts.fetch_account_with_reference(db, account.to_dict())
        return await members.remove_member(db, remote_user, member, collective, role)

    @strawberry.mutation(description="Accept or decline an invitation")
    async def reply_to_member_invitation(
        self,
        info: strawberry.Info,
        invitation: MemberInvitationReferenceInput,
        accept: bool,
    ) -> bool:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to reply to an invitation.",
        )
        return await member_invitations.reply_to_invitation(
            get_db_session(info), remote_user, invitation.id, accept,
        )

    @strawberry.mutation(description="Refund a transaction and its whole group")
    async def refund_transaction(
        self, info: strawberry.Info, transaction: TransactionReferenceInput,
    ) -> Transaction:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to refund a transaction.",
        )
        db = get_db_session(info)
        original = await transactions.get_transaction(db, transaction.id)
        if original is None:
            raise ResourceNotFoundError("Transaction", str(transaction.id))
        if not remote_user.is_admin(original.host_collective_id):
            raise Forbidden(
                "Only host admins can refund transactions.",
                ErrorContext(collective_id=original.host_collective_id, user_id=remote_user.id),
            )
        refunds = await transactions.refund_transaction(db, original, remote_user)
        await db.commit()
        refund = next(r for r in refunds if r.refund_transaction_id == original.id)
        return Transaction.from_model(refund)

    @strawberry.mutation(description="Mark a settlement invoice as paid")
    async def mark_settlement_expense_paid(
        self, info: strawberry.Info, expense: ExpenseReferenceInput,
    ) -> Expense:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to pay an expense.",
        )
        db = get_db_session(info)
        invoice = await db.get(ExpenseModel, expense.id)
        if invoice is None or invoice.is_deleted:
            raise ResourceNotFoundError("Expense", str(expense.id))
        platform = await accounts.get_account_by_slug(db, get_settings().platform_slug)
        if platform is None or not remote_user.is_admin(platform.id):
            raise Forbidden(
                "Only platform admins can mark settlements as paid.",
                ErrorContext(collective_id=invoice.collective_id, user_id=remote_user.id),
            )
        await host_settlement.mark_invoice_settled(db, invoice)
        await db.commit()
        logger.info(
            "Settlement invoice marked paid",
            extra={"expense_id": invoice.id, "user_id": remote_user.id},
        )
        return Expense.from_model(invoice)
