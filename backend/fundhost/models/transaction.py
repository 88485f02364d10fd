"""Transaction ORM — one side of a double-entry ledger pair.

Invariants:
    - Rows come in CREDIT/DEBIT pairs sharing transaction_group and kind
    - amount is signed cents: CREDIT amount == -DEBIT amount within a pair
    - is_debt rows record money owed between accounts (host <-> platform); their
      settlement lives in transaction_settlements keyed by (transaction_group, kind)
    - refund_transaction_id links an original row and its refund row both ways

Design Decisions:
    - settlement_status is a plain instance attribute, not a column: it is attached
      by services/transaction_settlements (attach_statuses_to_transactions, get_host_debts)
    - transaction_group as UUID: shared by every row written for one financial event
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class Transaction(SoftDeleteMixin, Base):
    """Ledger row."""
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_group_kind", "transaction_group", "kind"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False)
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    transaction_group: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, default=uuid.uuid4,
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    from_collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    host_collective_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=True,
    )
    expense_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("expenses.id"), nullable=True,
    )
    is_debt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_refund: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    refund_transaction_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transactions.id"), nullable=True,
    )
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    # Attached by the settlement service; not persisted
    settlement_status = None

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, type={self.type}, kind={self.kind}, "
            f"amount={self.amount}, group={self.transaction_group})>"
        )
