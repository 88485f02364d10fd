"""GraphQL Queries — accounts, invitations and host debts.

Invariants:
    - account() raises ResourceNotFoundError for unknown references, never returns null
    - memberInvitations and hostDebts are restricted to admins of the account/host
"""

import strawberry

from fundhost.core.domain_types import TransactionSettlementStatus
from fundhost.core.errors import ErrorContext, Forbidden
from fundhost.core.permissions import require_login
from fundhost.graphql.context import get_db_session, get_remote_user
from fundhost.graphql.types import (
    Account, AccountReferenceInput, MemberInvitation, Transaction,
)
from fundhost.services import accounts, member_invitations, transaction_settlements


@strawberry.type
class Query:
    @strawberry.field(description="Get an account by legacyId or slug")
    async def account(
        self, info: strawberry.Info, reference: AccountReferenceInput,
    ) -> Account:
        collective = await accounts.fetch_account_with_reference(
            get_db_session(info), reference.to_dict(),
        )
        return Account.from_model(collective)

    @strawberry.field(description="Profile account of the logged-in user")
    async def logged_in_account(self, info: strawberry.Info) -> Account | None:
        remote_user = get_remote_user(info)
        if remote_user is None:
            return None
        collective = await accounts.get_account_by_id(
            get_db_session(info), remote_user.collective_id,
        )
        return Account.from_model(collective) if collective else None

    @strawberry.field(description="Pending invitations to join an account")
    async def member_invitations(
        self, info: strawberry.Info, account: AccountReferenceInput,
    ) -> list[MemberInvitation]:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to see member invitations.",
        )
        db = get_db_session(info)
        collective = await accounts.fetch_account_with_reference(db, account.to_dict())
        if not remote_user.is_admin_of_collective(collective):
            raise Forbidden(
                "Only admins can see member invitations.",
                ErrorContext(collective_id=collective.id, user_id=remote_user.id),
            )
        rows = await member_invitations.list_invitations(db, collective.id)
        return [MemberInvitation.from_model(i) for i in rows]

    @strawberry.field(description="Debts a host owes the platform")
    async def host_debts(
        self,
        info: strawberry.Info,
        host: AccountReferenceInput,
        settlement_status: TransactionSettlementStatus | None = None,
    ) -> list[Transaction]:
        remote_user = require_login(
            get_remote_user(info), "You need to be logged in to see host debts.",
        )
        db = get_db_session(info)
        collective = await accounts.fetch_account_with_reference(db, host.to_dict())
        if not remote_user.is_admin(collective.id):
            raise Forbidden(
                "Only host admins can see host debts.",
                ErrorContext(collective_id=collective.id, user_id=remote_user.id),
            )
        debts = await transaction_settlements.get_host_debts(
            db, collective.id, settlement_status,
        )
        return [Transaction.from_model(t) for t in debts]
