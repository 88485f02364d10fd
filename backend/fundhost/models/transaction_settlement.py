"""TransactionSettlement ORM — accounting status of a debt between a host and the platform.

Invariants:
    - Identified by (transaction_group, kind); applies to the debt rows of that
      group with that kind
    - status is a TransactionSettlementStatus value: OWED -> INVOICED -> SETTLED
    - expense_id set once the debt is invoiced; SET NULL if the expense row goes away
    - Paranoid: reverting an OWED settlement soft-deletes it

Design Decisions:
    - kind reuses the TransactionKind value set instead of a second enum
    - No ORM relationship to Transaction: the join is on (group, kind), not a FK;
      services/transaction_settlements spells the join out
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class TransactionSettlement(SoftDeleteMixin, Base):
    """Settlement entity."""
    __tablename__ = "transaction_settlements"
    __table_args__ = (
        Index("ix_transaction_settlements_group_kind", "transaction_group", "kind"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_group: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    expense_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("expenses.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionSettlement(group={self.transaction_group}, "
            f"kind={self.kind}, status={self.status})>"
        )
