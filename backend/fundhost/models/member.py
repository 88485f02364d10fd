"""Member ORM — a role held by one account inside another.

Invariants:
    - collective_id is the account joined; member_collective_id is the joining account
    - role is a MemberRole value
    - Removal is a soft delete (deleted_at), history stays queryable

Design Decisions:
    - public_message lives on the membership: a backer writes one message per collective
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class Member(SoftDeleteMixin, Base):
    """Membership entity."""
    __tablename__ = "members"
    __table_args__ = (
        Index("ix_members_collective_member", "collective_id", "member_collective_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    member_collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    public_message: Mapped[str | None] = mapped_column(String(255), nullable=True)
    since: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    tier_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("tiers.id"), nullable=True,
    )
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
