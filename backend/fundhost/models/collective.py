"""Collective ORM — every account on the platform (users, organizations, collectives, events).

Invariants:
    - slug is unique and non-nullable; it addresses the profile page and GraphQL references
    - type is a CollectiveType value
    - host_collective_id points at the fiscal host; a host may host itself
    - settings is a JSON object, never null

Design Decisions:
    - Single table for all account types: members and transactions reference
      accounts uniformly regardless of type
    - Soft-deletable: ledger rows keep pointing at deleted accounts
"""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class Collective(SoftDeleteMixin, Base):
    """Account entity."""
    __tablename__ = "collectives"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="COLLECTIVE",
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    twitter_handle: Mapped[str | None] = mapped_column(String(64), nullable=True)
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD",
    )
    settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    can_apply: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    parent_collective_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=True,
    )
    host_collective_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Collective(id={self.id}, slug={self.slug}, type={self.type})>"
