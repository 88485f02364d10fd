"""Expense ORM — a request for payment, including platform settlement invoices.

Invariants:
    - collective_id is the paying account; from_collective_id is the payee
    - amount equals the sum of the live items' amounts
    - SETTLEMENT expenses carry one item per invoiced debt, matched by
      (transaction_group, transaction_kind)

Design Decisions:
    - items loaded with selectin: the async session never lazy-loads
    - delete-orphan on items: removing an item from expense.items deletes the row
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fundhost.db.base import Base, SoftDeleteMixin, utcnow


class Expense(SoftDeleteMixin, Base):
    """Expense entity."""
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    from_collective_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collectives.id"), nullable=False,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="INVOICE")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    items: Mapped[list["ExpenseItem"]] = relationship(
        "ExpenseItem", back_populates="expense",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ExpenseItem.id",
    )


class ExpenseItem(Base):
    """Line of an expense."""
    __tablename__ = "expense_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    expense_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    transaction_group: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    transaction_kind: Mapped[str | None] = mapped_column(String(30), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    expense: Mapped["Expense"] = relationship("Expense", back_populates="items")
