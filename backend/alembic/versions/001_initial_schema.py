"""Initial schema — accounts, users, tiers, memberships, expenses, ledger, activities.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "collectives",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="COLLECTIVE"),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("long_description", sa.Text, nullable=True),
        sa.Column("image", sa.String(512), nullable=True),
        sa.Column("twitter_handle", sa.String(64), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("settings", sa.JSON, nullable=False),
        sa.Column("can_apply", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("parent_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=True),
        sa.Column("host_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "tiers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("amount", sa.Integer, nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("interval", sa.String(10), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "members",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("member_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("public_message", sa.String(255), nullable=True),
        sa.Column("since", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("tier_id", sa.Integer, sa.ForeignKey("tiers.id"), nullable=True),
        sa.Column("created_by_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_members_collective_member", "members", ["collective_id", "member_collective_id"])

    op.create_table(
        "member_invitations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("member_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("since", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("from_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="INVOICE"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        *_timestamps(),
    )

    op.create_table(
        "expense_items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("expense_id", sa.Integer, sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("transaction_group", UUID(as_uuid=True), nullable=True),
        sa.Column("transaction_kind", sa.String(30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("kind", sa.String(30), nullable=False),
        sa.Column("transaction_group", UUID(as_uuid=True), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("from_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=False),
        sa.Column("host_collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=True),
        sa.Column("expense_id", sa.Integer, sa.ForeignKey("expenses.id"), nullable=True),
        sa.Column("is_debt", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_refund", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("refund_transaction_id", sa.Integer, sa.ForeignKey("transactions.id"), nullable=True),
        sa.Column("created_by_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_transactions_group_kind", "transactions", ["transaction_group", "kind"])

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("collective_id", sa.Integer, sa.ForeignKey("collectives.id"), nullable=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("transaction_id", sa.Integer, sa.ForeignKey("transactions.id"), nullable=True),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_index("ix_transactions_group_kind", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("expense_items")
    op.drop_table("expenses")
    op.drop_table("member_invitations")
    op.drop_index("ix_members_collective_member", table_name="members")
    op.drop_table("members")
    op.drop_table("tiers")
    op.drop_table("users")
    op.drop_table("collectives")
