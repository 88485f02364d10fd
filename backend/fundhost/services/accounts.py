"""Accounts — account lookup, remote-user loading, and hosting statistics.

Invariants:
    - Deleted accounts are never returned by reference lookups
    - load_remote_user snapshots roles from live Member rows of the user's profile account
    - Balances are the sum of live transaction amounts of an account (cents)

Design Decisions:
    - fetch_account_with_reference raises ResourceNotFoundError instead of returning None:
      every caller (GraphQL mutations, queries) needs the account to exist
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import CollectiveId, UserId
from fundhost.core.errors import ResourceNotFoundError
from fundhost.core.permissions import RemoteUser
from fundhost.infrastructure.auth import decode_access_token, extract_token
from fundhost.models.collective import Collective
from fundhost.models.member import Member
from fundhost.models.tier import Tier
from fundhost.models.transaction import Transaction
from fundhost.models.user import User
from fundhost.schemas import validate_input
from fundhost.schemas.account import AccountReference

logger = logging.getLogger(__name__)


async def get_account_by_slug(db: AsyncSession, slug: str) -> Collective | None:
    result = await db.execute(
        select(Collective)
        .where(Collective.slug == slug)
        .where(Collective.deleted_at.is_(None)),
    )
    return result.scalar_one_or_none()


async def get_account_by_id(db: AsyncSession, account_id: CollectiveId) -> Collective | None:
    account = await db.get(Collective, account_id)
    if account is None or account.is_deleted:
        return None
    return account


async def fetch_account_with_reference(
    db: AsyncSession, reference: AccountReference | dict,
) -> Collective:
    """Resolve an account reference (legacy id or slug) or raise."""
    if isinstance(reference, dict):
        reference = validate_input(AccountReference, reference)
    if reference.legacy_id is not None:
        account = await get_account_by_id(db, reference.legacy_id)
    else:
        account = await get_account_by_slug(db, reference.slug)
    if account is None:
        raise ResourceNotFoundError("Account", reference.describe())
    return account


async def load_user_roles(db: AsyncSession, user: User) -> dict[int, set[str]]:
    """Map collective id -> roles held by the user's profile account."""
    result = await db.execute(
        select(Member.collective_id, Member.role)
        .where(Member.member_collective_id == user.collective_id)
        .where(Member.deleted_at.is_(None)),
    )
    roles: dict[int, set[str]] = {}
    for collective_id, role in result.all():
        roles.setdefault(collective_id, set()).add(role)
    return roles


async def load_remote_user(db: AsyncSession, user_id: UserId) -> RemoteUser | None:
    user = await db.get(User, user_id)
    if user is None:
        logger.warning("Token refers to an unknown user", extra={"user_id": user_id})
        return None
    return RemoteUser(
        id=user.id,
        email=user.email,
        collective_id=user.collective_id,
        roles=await load_user_roles(db, user),
    )


async def resolve_remote_user(
    db: AsyncSession, authorization: str | None, cookie: str | None = None,
) -> RemoteUser | None:
    """Authenticate the request from its bearer token; None when anonymous."""
    token = extract_token(authorization, cookie)
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    return await load_remote_user(db, user_id)


async def get_balance(db: AsyncSession, collective_id: CollectiveId) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount), 0))
        .where(Transaction.collective_id == collective_id)
        .where(Transaction.deleted_at.is_(None)),
    )
    return int(result.scalar_one())


def _hosted_filter(host_id: CollectiveId):
    return (
        (Collective.host_collective_id == host_id)
        & (Collective.id != host_id)
        & Collective.deleted_at.is_(None)
    )


async def count_hosted_collectives(db: AsyncSession, host_id: CollectiveId) -> int:
    result = await db.execute(
        select(func.count(Collective.id)).where(_hosted_filter(host_id)),
    )
    return int(result.scalar_one())


async def list_hosted_collectives(
    db: AsyncSession, host_id: CollectiveId, limit: int = 20,
) -> list[tuple[Collective, int]]:
    """Collectives hosted by host_id with their balance, richest first."""
    balance = func.coalesce(func.sum(Transaction.amount), 0).label("balance")
    result = await db.execute(
        select(Collective, balance)
        .outerjoin(
            Transaction,
            (Transaction.collective_id == Collective.id)
            & Transaction.deleted_at.is_(None),
        )
        .where(_hosted_filter(host_id))
        .group_by(Collective.id)
        .order_by(balance.desc(), Collective.id)
        .limit(limit),
    )
    return [(collective, int(total)) for collective, total in result.all()]


async def list_tiers(db: AsyncSession, collective_id: CollectiveId) -> list[Tier]:
    result = await db.execute(
        select(Tier)
        .where(Tier.collective_id == collective_id)
        .where(Tier.deleted_at.is_(None))
        .order_by(Tier.id),
    )
    return list(result.scalars().all())
