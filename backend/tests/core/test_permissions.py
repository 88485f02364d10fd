"""Permissions — verifies admin and edit rules of RemoteUser.

Tests:
    - A user is admin of their own profile account
    - ADMIN role on the account or its parent makes the user admin of it
    - Non-admin roles (BACKER, MEMBER) do not
    - can_edit_collective additionally accepts host admins
    - require_login raises Unauthorized with the caller's message
"""

from dataclasses import dataclass

import pytest

from fundhost.core.errors import Unauthorized
from fundhost.core.permissions import RemoteUser, require_login


@dataclass
class Account:
    id: int
    parent_collective_id: int | None = None
    host_collective_id: int | None = None


def _user(**roles) -> RemoteUser:
    return RemoteUser(
        id=1, email="u@example.com", collective_id=100,
        roles={int(k[1:]): set(v) for k, v in roles.items()},
    )


def test_admin_of_own_profile():
    assert _user().is_admin_of_collective(Account(id=100))


def test_admin_role_grants_admin():
    user = _user(c5={"ADMIN"})
    assert user.is_admin_of_collective(Account(id=5))


def test_admin_of_parent_is_admin_of_child():
    user = _user(c5={"ADMIN"})
    assert user.is_admin_of_collective(Account(id=6, parent_collective_id=5))


def test_other_roles_do_not_grant_admin():
    user = _user(c5={"BACKER", "MEMBER"})
    assert not user.is_admin_of_collective(Account(id=5))


def test_host_admin_can_edit_but_is_not_admin():
    user = _user(c9={"ADMIN"})
    hosted = Account(id=5, host_collective_id=9)
    assert user.can_edit_collective(hosted)
    assert not user.is_admin_of_collective(hosted)


def test_is_admin_of_none_is_false():
    assert not _user().is_admin(None)


def test_require_login():
    user = _user()
    assert require_login(user, "log in") is user
    with pytest.raises(Unauthorized, match="You need to be logged in to invite a member."):
        require_login(None, "You need to be logged in to invite a member.")
