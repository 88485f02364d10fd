"""Profile — load the data shown on a user or organization profile page.

Invariants:
    - Only live USER and ORGANIZATION accounts have a profile page (404 otherwise)
    - The long description is Markdown, rendered to HTML here and sanitized with nh3:
      raw HTML in the source never reaches the page (scripts are dropped with their content)
    - Read-only: never flushes or commits
"""

import logging

import markdown
import nh3
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core.domain_types import CollectiveType
from fundhost.core.errors import ResourceNotFoundError
from fundhost.core.profile_strings import PROFILE_TYPES
from fundhost.core.profile_view import (
    HostedCollective, MembershipCard, ProfileData, TierCard, HOSTED_COLLECTIVES_LIMIT,
)
from fundhost.models.collective import Collective
from fundhost.services import accounts, members

logger = logging.getLogger(__name__)


def render_markdown(source: str | None) -> str | None:
    """Markdown to HTML, sanitized: the result is emitted unescaped by the template."""
    if not source:
        return None
    return nh3.clean(markdown.markdown(source))


async def get_profile_account(db: AsyncSession, slug: str) -> Collective:
    account = await accounts.get_account_by_slug(db, slug)
    if account is None or account.type not in {t.value for t in PROFILE_TYPES}:
        raise ResourceNotFoundError("Profile", slug)
    return account


async def load_profile_data(db: AsyncSession, account: Collective) -> ProfileData:
    """Gather memberships, tiers and hosted collectives for the page."""
    parent = None
    if account.parent_collective_id is not None:
        parent = await accounts.get_account_by_id(db, account.parent_collective_id)

    memberships = [
        MembershipCard(
            role=member.role,
            collective_id=collective.id,
            slug=collective.slug,
            name=collective.name,
            image=collective.image,
            description=member.description,
            public_message=member.public_message,
            since=member.since,
        )
        for member, collective in await members.list_memberships(db, account.id)
    ]

    tiers = [
        TierCard(
            name=tier.name, description=tier.description, amount=tier.amount,
            currency=tier.currency, interval=tier.interval,
        )
        for tier in await accounts.list_tiers(db, account.id)
    ]

    hosted_count = await accounts.count_hosted_collectives(db, account.id)
    hosted = []
    if hosted_count:
        hosted = [
            HostedCollective(
                slug=collective.slug, name=collective.name, image=collective.image,
                balance=balance, currency=collective.currency,
            )
            for collective, balance in await accounts.list_hosted_collectives(
                db, account.id, limit=HOSTED_COLLECTIVES_LIMIT,
            )
        ]

    logger.debug(
        f"Profile loaded with {len(memberships)} memberships",
        extra={"collective_id": account.id},
    )
    return ProfileData(
        slug=account.slug,
        name=account.name,
        type=CollectiveType(account.type),
        created_at=account.created_at,
        description=account.description,
        long_description=account.long_description,
        long_description_html=render_markdown(account.long_description),
        image=account.image,
        twitter_handle=account.twitter_handle,
        can_apply=bool(account.can_apply),
        accepts_applications=bool((account.settings or {}).get("apply")),
        parent_image=parent.image if parent else None,
        parent_twitter_handle=parent.twitter_handle if parent else None,
        memberships=memberships,
        tiers=tiers,
        hosted_count=hosted_count,
        hosted=hosted,
    )
