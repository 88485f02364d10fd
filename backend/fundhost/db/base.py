"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Soft-deletable ("paranoid") models carry deleted_at via SoftDeleteMixin;
      a row with deleted_at set is invisible to every service query

Design Decisions:
    - Separate file for Base: avoids circular imports between models (ADR: SQLAlchemy best practice)
    - Soft delete as a mixin column, not a global query filter: every read states
      `deleted_at.is_(None)` explicitly so raw joins stay readable
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all fundhost ORM models."""
    pass


class SoftDeleteMixin:
    """Adds deleted_at and helpers for paranoid tables."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()
