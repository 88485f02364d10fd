"""Member Invitations — invite accounts to join with a role, and reply to invitations.

Invariants:
    - Only admins of the account can invite (Unauthorized otherwise)
    - An account already holding the role cannot be invited to it again (ConflictError)
    - One live invitation per (account, member account): re-inviting updates it
    - Only an admin of the invited account can reply; replying soft-deletes the invitation
    - Accepting creates the Member with the invitation's role, description and since
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import ActivityType, CollectiveId, MemberRole
from fundhost.core.errors import (
    ConflictError, ErrorContext, Forbidden, ResourceNotFoundError, Unauthorized,
)
from fundhost.core.permissions import RemoteUser
from fundhost.db.base import utcnow
from fundhost.models.collective import Collective
from fundhost.models.member import Member
from fundhost.models.member_invitation import MemberInvitation
from fundhost.schemas import validate_input
from fundhost.schemas.member import MemberInvitationParams
from fundhost.services.accounts import get_account_by_id
from fundhost.services.activities import record_activity

logger = logging.getLogger(__name__)


async def find_invitation(
    db: AsyncSession, collective_id: CollectiveId, member_collective_id: CollectiveId,
) -> MemberInvitation | None:
    result = await db.execute(
        select(MemberInvitation)
        .where(MemberInvitation.collective_id == collective_id)
        .where(MemberInvitation.member_collective_id == member_collective_id)
        .where(MemberInvitation.deleted_at.is_(None))
        .order_by(MemberInvitation.id)
        .limit(1),
    )
    return result.scalar_one_or_none()


async def invite_member(
    db: AsyncSession,
    remote_user: RemoteUser,
    member_account: Collective,
    account: Collective,
    role: MemberRole,
    description: str | None = None,
    since=None,
) -> MemberInvitation:
    """Invite member_account to join account with the given role."""
    context = ErrorContext(collective_id=account.id, user_id=remote_user.id)
    if not remote_user.is_admin_of_collective(account):
        raise Unauthorized("Only admins can send an invitation.", context)
    params = validate_input(
        MemberInvitationParams,
        {"role": role, "description": description, "since": since},
    )

    existing = await db.execute(
        select(Member.id)
        .where(Member.collective_id == account.id)
        .where(Member.member_collective_id == member_account.id)
        .where(Member.role == params.role.value)
        .where(Member.deleted_at.is_(None))
        .limit(1),
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(
            f"{member_account.name} is already {params.role.value} of {account.name}",
            context,
        )

    invitation = await find_invitation(db, account.id, member_account.id)
    if invitation is None:
        invitation = MemberInvitation(
            collective_id=account.id,
            member_collective_id=member_account.id,
            created_by_user_id=remote_user.id,
        )
        db.add(invitation)
    invitation.role = params.role.value
    invitation.description = params.description
    invitation.since = params.since

    record_activity(
        db, ActivityType.MEMBER_INVITED, collective_id=account.id, user_id=remote_user.id,
        data={"member_collective_id": member_account.id, "role": params.role.value},
    )
    await db.commit()
    logger.info(
        f"Invited {member_account.slug} as {params.role.value}",
        extra={"collective_id": account.id, "user_id": remote_user.id},
    )
    return invitation


async def reply_to_invitation(
    db: AsyncSession,
    remote_user: RemoteUser,
    invitation_id: int,
    accept: bool,
) -> bool:
    """Accept or decline an invitation on behalf of the invited account."""
    invitation = await db.get(MemberInvitation, invitation_id)
    if invitation is None or invitation.is_deleted:
        raise ResourceNotFoundError("MemberInvitation", str(invitation_id))
    member_account = await get_account_by_id(db, invitation.member_collective_id)
    if member_account is None or not remote_user.is_admin_of_collective(member_account):
        raise Forbidden(
            "Only an admin of the invited account can reply to this invitation.",
            ErrorContext(collective_id=invitation.collective_id, user_id=remote_user.id),
        )

    if accept:
        db.add(Member(
            collective_id=invitation.collective_id,
            member_collective_id=invitation.member_collective_id,
            role=invitation.role,
            description=invitation.description,
            since=invitation.since or utcnow(),
            created_by_user_id=invitation.created_by_user_id,
        ))
    invitation.soft_delete()
    record_activity(
        db,
        ActivityType.MEMBER_CREATED if accept else ActivityType.INVITATION_DECLINED,
        collective_id=invitation.collective_id, user_id=remote_user.id,
        data={"member_collective_id": invitation.member_collective_id, "role": invitation.role},
    )
    await db.commit()
    logger.info(
        f"Invitation {invitation_id} {'accepted' if accept else 'declined'}",
        extra={"collective_id": invitation.collective_id, "user_id": remote_user.id},
    )
    return accept


async def list_invitations(db: AsyncSession, collective_id: CollectiveId) -> list[MemberInvitation]:
    result = await db.execute(
        select(MemberInvitation)
        .where(MemberInvitation.collective_id == collective_id)
        .where(MemberInvitation.deleted_at.is_(None))
        .order_by(MemberInvitation.id),
    )
    return list(result.scalars().all())
