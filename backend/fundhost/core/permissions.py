"""Permissions — pure role checks for the logged-in user.

Invariants:
    - No IO: roles are loaded by the shell (services/accounts.load_remote_user)
      and passed in as RemoteUser.roles
    - A user is always admin of their own profile account
    - Admin of a parent account is admin of its children (events, projects)
    - can_edit_collective is a superset of is_admin_of_collective (host admins too)

Design Decisions:
    - RemoteUser as a dataclass snapshot instead of the ORM User: resolvers and the
      profile page can check permissions without touching the session
"""

from dataclasses import dataclass, field
from typing import Protocol

from fundhost.core.domain_types import MemberRole
from fundhost.core.errors import Unauthorized


class CollectiveLike(Protocol):
    """Structural contract for accounts passed to permission checks."""
    id: int
    parent_collective_id: int | None
    host_collective_id: int | None


@dataclass
class RemoteUser:
    """Authenticated caller with the roles it holds, keyed by collective id."""
    id: int
    email: str
    collective_id: int
    roles: dict[int, set[str]] = field(default_factory=dict)

    def has_role(self, collective_id: int | None, *roles: MemberRole) -> bool:
        if collective_id is None:
            return False
        held = self.roles.get(collective_id, set())
        return any(role.value in held for role in roles)

    def is_admin(self, collective_id: int | None) -> bool:
        if collective_id is None:
            return False
        if collective_id == self.collective_id:
            return True
        return self.has_role(collective_id, MemberRole.ADMIN)

    def is_admin_of_collective(self, collective: CollectiveLike) -> bool:
        return (
            self.is_admin(collective.id)
            or self.is_admin(collective.parent_collective_id)
        )

    def can_edit_collective(self, collective: CollectiveLike) -> bool:
        return (
            self.is_admin_of_collective(collective)
            or self.is_admin(collective.host_collective_id)
        )


def require_login(remote_user: RemoteUser | None, message: str) -> RemoteUser:
    """Return the remote user or raise Unauthorized with the given message."""
    if remote_user is None:
        raise Unauthorized(message)
    return remote_user
