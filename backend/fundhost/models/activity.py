"""Activity ORM — append-only audit trail of member and ledger events.

Invariants:
    - Never updated or deleted by services
    - data holds the event payload as JSON (ids and amounts, no ORM objects)
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from fundhost.db.base import Base, utcnow


class Activity(Base):
    """Activity entity."""
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    collective_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True,
    )
    transaction_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transactions.id"), nullable=True,
    )
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
