"""GraphQL Members — account queries, invitations, public messages and removal.

Tests:
    - account(reference) resolves by slug or legacyId, unknown references error
    - Invitation flow: invite, list, accept, then the membership is visible
    - Domain errors carry code, category and severity in extensions
    - loggedInAccount is null for anonymous callers
"""

from fundhost.core.domain_types import MemberRole

ACCOUNT = """
query Account($slug: String, $legacyId: Int) {
  account(reference: {slug: $slug, legacyId: $legacyId}) {
    legacyId slug name type
    host { slug }
    stats { balance collectivesHosted }
  }
}
"""

INVITE = """
mutation Invite($member: String!, $account: String!, $role: MemberRole!) {
  inviteMember(memberInvitation: {
    memberAccount: {slug: $member}, account: {slug: $account}, role: $role,
    description: "Treasurer"
  }) {
    id role description
    account { slug }
    memberAccount { slug }
  }
}
"""

INVITATIONS = """
query Invitations($account: String!) {
  memberInvitations(account: {slug: $account}) { id role memberAccount { slug } }
}
"""

REPLY = """
mutation Reply($id: Int!, $accept: Boolean!) {
  replyToMemberInvitation(invitation: {id: $id}, accept: $accept)
}
"""

MEMBERS = """
query Members($slug: String!, $role: MemberRole) {
  account(reference: {slug: $slug}) {
    members(role: $role) { role publicMessage memberAccount { slug } }
  }
}
"""

EDIT_MESSAGE = """
mutation Edit($from: String!, $to: String!, $message: String) {
  editPublicMessage(fromAccount: {slug: $from}, toAccount: {slug: $to}, message: $message) {
    publicMessage role
  }
}
"""

REMOVE = """
mutation Remove($member: String!, $account: String!, $role: MemberRole) {
  removeMember(memberAccount: {slug: $member}, account: {slug: $account}, role: $role)
}
"""


def error_codes(body: dict) -> list[str]:
    return [e["extensions"]["code"] for e in body.get("errors") or []]


# --- Queries ------------------------------------------------------------------

async def test_account_by_slug(gql, ledger):
    body = await gql(ACCOUNT, {"slug": "webpack"})
    account = body["data"]["account"]
    assert account["legacyId"] == ledger.collective.id
    assert account["type"] == "COLLECTIVE"
    assert account["host"] == {"slug": "host"}
    assert account["stats"] == {"balance": 0, "collectivesHosted": 0}


async def test_account_by_legacy_id(gql, ledger):
    body = await gql(ACCOUNT, {"legacyId": ledger.host.id})
    assert body["data"]["account"]["slug"] == "host"
    assert body["data"]["account"]["stats"]["collectivesHosted"] == 1


async def test_unknown_account_is_not_found(gql, ledger):
    body = await gql(ACCOUNT, {"slug": "nope"})
    assert body["data"] is None
    error = body["errors"][0]
    assert error["extensions"]["code"] == "RESOURCE_NOT_FOUND"
    assert error["extensions"]["category"] == "resource_not_found"


async def test_logged_in_account(gql, ledger):
    query = "{ loggedInAccount { slug type } }"
    anonymous = await gql(query)
    assert anonymous["data"]["loggedInAccount"] is None
    body = await gql(query, user=ledger.backer)
    assert body["data"]["loggedInAccount"] == {"slug": "backer", "type": "USER"}


# --- Invitations --------------------------------------------------------------

async def test_invitation_flow(gql, ledger, make_user, test_db):
    newcomer, _ = await make_user("newcomer")
    await test_db.commit()

    invited = await gql(
        INVITE, {"member": "newcomer", "account": "host", "role": "ACCOUNTANT"},
        user=ledger.host_admin,
    )
    invitation = invited["data"]["inviteMember"]
    assert invitation["role"] == "ACCOUNTANT"
    assert invitation["description"] == "Treasurer"
    assert invitation["account"] == {"slug": "host"}
    assert invitation["memberAccount"] == {"slug": "newcomer"}

    listed = await gql(INVITATIONS, {"account": "host"}, user=ledger.host_admin)
    assert [i["id"] for i in listed["data"]["memberInvitations"]] == [invitation["id"]]

    replied = await gql(REPLY, {"id": invitation["id"], "accept": True}, user=newcomer)
    assert replied["data"]["replyToMemberInvitation"] is True

    members = await gql(MEMBERS, {"slug": "host", "role": "ACCOUNTANT"})
    assert members["data"]["account"]["members"] == [
        {"role": "ACCOUNTANT", "publicMessage": None, "memberAccount": {"slug": "newcomer"}},
    ]
    listed = await gql(INVITATIONS, {"account": "host"}, user=ledger.host_admin)
    assert listed["data"]["memberInvitations"] == []


async def test_invite_requires_login(gql, ledger):
    body = await gql(INVITE, {"member": "backer", "account": "host", "role": "MEMBER"})
    assert error_codes(body) == ["UNAUTHORIZED"]
    assert body["errors"][0]["message"] == "You need to be logged in to invite a member."


async def test_invite_by_non_admin(gql, ledger):
    body = await gql(
        INVITE, {"member": "backer", "account": "host", "role": "MEMBER"}, user=ledger.backer,
    )
    assert error_codes(body) == ["UNAUTHORIZED"]
    assert body["errors"][0]["message"] == "Only admins can send an invitation."


async def test_invite_with_backer_role_rejected(gql, ledger):
    body = await gql(
        INVITE, {"member": "backer", "account": "host", "role": "BACKER"},
        user=ledger.host_admin,
    )
    assert error_codes(body) == ["VALIDATION_ERROR"]


async def test_invitations_hidden_from_non_admins(gql, ledger):
    body = await gql(INVITATIONS, {"account": "host"}, user=ledger.backer)
    assert error_codes(body) == ["FORBIDDEN"]


# --- Public messages & removal ------------------------------------------------

async def test_edit_public_message(gql, ledger, make_member, test_db):
    await make_member(ledger.collective, ledger.backer_profile, MemberRole.BACKER)
    await test_db.commit()

    body = await gql(
        EDIT_MESSAGE, {"from": "backer", "to": "webpack", "message": "Love it"},
        user=ledger.backer,
    )
    assert body["data"]["editPublicMessage"] == {"publicMessage": "Love it", "role": "BACKER"}

    members = await gql(MEMBERS, {"slug": "webpack", "role": "BACKER"})
    assert members["data"]["account"]["members"][0]["publicMessage"] == "Love it"


async def test_edit_public_message_anonymous_forbidden(gql, ledger, make_member, test_db):
    await make_member(ledger.collective, ledger.backer_profile, MemberRole.BACKER)
    await test_db.commit()
    body = await gql(EDIT_MESSAGE, {"from": "backer", "to": "webpack", "message": "Hi"})
    assert error_codes(body) == ["FORBIDDEN"]


async def test_remove_member(gql, ledger, make_member, test_db):
    await make_member(ledger.host, ledger.backer_profile, MemberRole.MEMBER)
    await test_db.commit()

    body = await gql(
        REMOVE, {"member": "backer", "account": "host", "role": "MEMBER"},
        user=ledger.host_admin,
    )
    assert body["data"]["removeMember"] is True
    members = await gql(MEMBERS, {"slug": "host", "role": "MEMBER"})
    assert members["data"]["account"]["members"] == []


async def test_remove_last_admin_forbidden(gql, ledger):
    body = await gql(
        REMOVE, {"member": "host-admin", "account": "host", "role": "ADMIN"},
        user=ledger.host_admin,
    )
    assert error_codes(body) == ["FORBIDDEN"]
    assert "at least one admin" in body["errors"][0]["message"]


async def test_remove_requires_login(gql, ledger):
    body = await gql(REMOVE, {"member": "backer", "account": "host", "role": "MEMBER"})
    assert error_codes(body) == ["UNAUTHORIZED"]
