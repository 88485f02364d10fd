"""MemberInvitation ORM — a pending offer for an account to join with a role.

Invariants:
    - At most one live invitation per (collective_id, member_collective_id);
      re-inviting updates it (services/member_invitations.invite)
    - Replying (accept or decline) soft-deletes the invitation
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class MemberInvitation(SoftDeleteMixin, Base):
    """Invitation entity."""
    __tablename__ = "member_invitations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    member_collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    since: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
