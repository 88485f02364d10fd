"""Members — public messages, removal, and membership listings.

Invariants:
    - edit_public_message requires the caller to be admin of the member (from) account
    - remove_member requires admin of the account and a manageable role
      (ACCOUNTANT, ADMIN, MEMBER); it never removes the last ADMIN
    - Removal soft-deletes the memberships (account, member account, role)
    - Mutating operations commit: each is one request-level unit of work

Design Decisions:
    - Authorization checks live here, not in the GraphQL layer: REST or scripts
      calling the service get the same rules
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import (
    ActivityType, CollectiveId, MemberRole, MANAGEABLE_MEMBER_ROLES,
)
from fundhost.core.errors import ErrorContext, Forbidden, ResourceNotFoundError, Unauthorized
from fundhost.core.permissions import RemoteUser
from fundhost.models.collective import Collective
from fundhost.models.member import Member
from fundhost.schemas import validate_input
from fundhost.schemas.member import PublicMessageUpdate
from fundhost.services.activities import record_activity

logger = logging.getLogger(__name__)


def _live_memberships(collective_id: CollectiveId, member_collective_id: CollectiveId):
    return (
        select(Member)
        .where(Member.collective_id == collective_id)
        .where(Member.member_collective_id == member_collective_id)
        .where(Member.deleted_at.is_(None))
        .order_by(Member.id)
    )


async def edit_public_message(
    db: AsyncSession,
    remote_user: RemoteUser | None,
    from_account: Collective,
    to_account: Collective,
    message: str | None,
) -> Member:
    """Set the public message on every membership from_account holds in to_account."""
    if remote_user is None or not remote_user.is_admin_of_collective(from_account):
        raise Forbidden(
            "You don't have the permission to edit member public message",
            ErrorContext(collective_id=from_account.id),
        )
    params = validate_input(PublicMessageUpdate, {"message": message})

    result = await db.execute(_live_memberships(to_account.id, from_account.id))
    members = list(result.scalars().all())
    if not members:
        raise ResourceNotFoundError("Member", f"{from_account.slug} in {to_account.slug}")
    for member in members:
        member.public_message = params.message
    await db.commit()
    logger.info(
        f"Public message edited on {len(members)} memberships",
        extra={"collective_id": to_account.id, "user_id": remote_user.id},
    )
    return members[0]


async def count_admins(db: AsyncSession, collective_id: CollectiveId) -> int:
    result = await db.execute(
        select(func.count(Member.id))
        .where(Member.collective_id == collective_id)
        .where(Member.role == MemberRole.ADMIN.value)
        .where(Member.deleted_at.is_(None)),
    )
    return int(result.scalar_one())


async def remove_member(
    db: AsyncSession,
    remote_user: RemoteUser,
    member_account: Collective,
    account: Collective,
    role: MemberRole | None,
) -> bool:
    """Soft-delete the memberships of member_account in account with the given role."""
    context = ErrorContext(collective_id=account.id, user_id=remote_user.id)
    if not remote_user.is_admin_of_collective(account):
        raise Unauthorized("Only admins can remove a member.", context)
    if role not in MANAGEABLE_MEMBER_ROLES:
        raise Forbidden("You can only remove accountants, admins, or members.", context)

    result = await db.execute(
        _live_memberships(account.id, member_account.id)
        .where(Member.role == role.value),
    )
    members = list(result.scalars().all())
    if not members:
        raise ResourceNotFoundError(
            "Member", f"{member_account.slug} as {role.value} of {account.slug}",
        )
    if role == MemberRole.ADMIN and await count_admins(db, account.id) <= len(members):
        raise Forbidden("An account must keep at least one admin.", context)

    for member in members:
        member.soft_delete()
    record_activity(
        db, ActivityType.MEMBER_REMOVED, collective_id=account.id, user_id=remote_user.id,
        data={"member_collective_id": member_account.id, "role": role.value},
    )
    await db.commit()
    logger.info(
        f"Removed {member_account.slug} ({role.value})",
        extra={"collective_id": account.id, "user_id": remote_user.id},
    )
    return True


async def list_members(
    db: AsyncSession, collective_id: CollectiveId, role: MemberRole | None = None,
) -> list[Member]:
    """Live members of an account."""
    query = (
        select(Member)
        .where(Member.collective_id == collective_id)
        .where(Member.deleted_at.is_(None))
    )
    if role is not None:
        query = query.where(Member.role == role.value)
    result = await db.execute(query.order_by(Member.id))
    return list(result.scalars().all())


async def list_memberships(
    db: AsyncSession, member_collective_id: CollectiveId, role: MemberRole | None = None,
) -> list[tuple[Member, Collective]]:
    """Live memberships held by an account, with the account joined (memberOf)."""
    query = (
        select(Member, Collective)
        .join(Collective, Collective.id == Member.collective_id)
        .where(Member.member_collective_id == member_collective_id)
        .where(Member.deleted_at.is_(None))
        .where(Collective.deleted_at.is_(None))
    )
    if role is not None:
        query = query.where(Member.role == role.value)
    result = await db.execute(query.order_by(Member.id))
    return [(member, collective) for member, collective in result.all()]
