"""Member Invitations — inviting accounts and replying to invitations.

Tests:
    - Only admins invite, and only ADMIN, MEMBER or ACCOUNTANT roles
    - Re-inviting updates the pending invitation instead of adding one
    - Inviting an account already holding the role conflicts
    - Accepting creates the membership; declining only closes the invitation
    - Only an admin of the invited account can reply, once
"""

import pytest
from sqlalchemy import select

from fundhost.core.domain_types import ActivityType, MemberRole
from fundhost.core.errors import (
    ConflictError, Forbidden, ResourceNotFoundError, Unauthorized, ValidationError,
)
from fundhost.models.activity import Activity
from fundhost.models.collective import Collective
from fundhost.services.member_invitations import (
    invite_member, list_invitations, reply_to_invitation,
)
from fundhost.services.members import list_members


@pytest.fixture
async def invite(test_db, ledger, make_user, remote_user_for):
    """Host admin invites a new user to the host as MEMBER."""
    user, profile = await make_user("newcomer")
    await test_db.commit()
    host_admin = await remote_user_for(ledger.host_admin)
    invitation = await invite_member(
        test_db, host_admin, profile, ledger.host, MemberRole.MEMBER,
        description="  Designer  ",
    )
    return {
        "invitation": invitation,
        "host_admin": host_admin,
        "invitee": await remote_user_for(user),
        "invitee_profile": profile,
    }


# --- invite_member ------------------------------------------------------------

async def test_admin_invites(test_db, ledger, invite):
    invitation = invite["invitation"]
    assert invitation.collective_id == ledger.host.id
    assert invitation.member_collective_id == invite["invitee_profile"].id
    assert invitation.role == "MEMBER"
    assert invitation.description == "Designer"
    assert invitation.created_by_user_id == ledger.host_admin.id

    result = await test_db.execute(
        select(Activity).where(Activity.type == ActivityType.MEMBER_INVITED.value),
    )
    assert result.scalar_one().collective_id == ledger.host.id


async def test_reinvite_updates_pending_invitation(test_db, ledger, invite):
    updated = await invite_member(
        test_db, invite["host_admin"], invite["invitee_profile"], ledger.host,
        MemberRole.ACCOUNTANT,
    )
    assert updated.id == invite["invitation"].id
    assert updated.role == "ACCOUNTANT"
    assert len(await list_invitations(test_db, ledger.host.id)) == 1


async def test_non_admin_cannot_invite(test_db, ledger, remote_user_for):
    backer = await remote_user_for(ledger.backer)
    with pytest.raises(Unauthorized, match="Only admins can send an invitation."):
        await invite_member(
            test_db, backer, ledger.backer_profile, ledger.host, MemberRole.ADMIN,
        )


@pytest.mark.parametrize("role", [MemberRole.BACKER, MemberRole.HOST, MemberRole.FOLLOWER])
async def test_uninvitable_roles_rejected(test_db, ledger, remote_user_for, role):
    host_admin = await remote_user_for(ledger.host_admin)
    with pytest.raises(ValidationError):
        await invite_member(test_db, host_admin, ledger.backer_profile, ledger.host, role)


async def test_existing_member_conflicts(test_db, ledger, remote_user_for):
    host_admin = await remote_user_for(ledger.host_admin)
    host_admin_profile = await test_db.get(Collective, host_admin.collective_id)
    with pytest.raises(ConflictError, match="already ADMIN"):
        await invite_member(
            test_db, host_admin, host_admin_profile, ledger.host, MemberRole.ADMIN,
        )


# --- reply_to_invitation ------------------------------------------------------

async def test_accept_creates_membership(test_db, ledger, invite):
    accepted = await reply_to_invitation(
        test_db, invite["invitee"], invite["invitation"].id, True,
    )
    assert accepted is True

    members = await list_members(test_db, ledger.host.id, MemberRole.MEMBER)
    assert [m.member_collective_id for m in members] == [invite["invitee_profile"].id]
    assert members[0].description == "Designer"
    assert members[0].since is not None
    assert await list_invitations(test_db, ledger.host.id) == []


async def test_decline_creates_nothing(test_db, ledger, invite):
    accepted = await reply_to_invitation(
        test_db, invite["invitee"], invite["invitation"].id, False,
    )
    assert accepted is False
    assert await list_members(test_db, ledger.host.id, MemberRole.MEMBER) == []
    assert await list_invitations(test_db, ledger.host.id) == []

    result = await test_db.execute(
        select(Activity).where(Activity.type == ActivityType.INVITATION_DECLINED.value),
    )
    assert result.scalar_one().user_id == invite["invitee"].id


async def test_only_invitee_replies(test_db, invite):
    with pytest.raises(Forbidden):
        await reply_to_invitation(
            test_db, invite["host_admin"], invite["invitation"].id, True,
        )


async def test_reply_twice_not_found(test_db, invite):
    await reply_to_invitation(test_db, invite["invitee"], invite["invitation"].id, True)
    with pytest.raises(ResourceNotFoundError):
        await reply_to_invitation(test_db, invite["invitee"], invite["invitation"].id, True)


async def test_reply_to_unknown_invitation(test_db, invite):
    with pytest.raises(ResourceNotFoundError):
        await reply_to_invitation(test_db, invite["invitee"], 9999, False)
