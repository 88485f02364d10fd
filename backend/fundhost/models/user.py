"""User ORM — a login identity bound to a USER profile account.

Invariants:
    - email is unique
    - collective_id always points at the user's own profile account

Design Decisions:
    - Roles are not stored on the user: they are the live Member rows whose
      member_collective_id is the user's profile account
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from fundhost.db.base import Base, utcnow


class User(Base):
    """User entity."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
