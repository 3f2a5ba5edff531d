"""Create the reassignment transaction ledger table.

Revision ID: 0001
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "reassignment_transaction",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_reassignment_transaction"),
    )
    op.create_index(
        "ix_reassignment_transaction_created_at",
        "reassignment_transaction",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_reassignment_transaction_created_at", table_name="reassignment_transaction")
    op.drop_table("reassignment_transaction")
