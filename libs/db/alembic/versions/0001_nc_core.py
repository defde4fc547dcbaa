# ruff: noqa: I001
"""Captured transactions table.

Revision ID: 0001_nc_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_nc_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "nc_transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency_code", sa.CHAR(3), nullable=False),
        sa.Column("original_amount", sa.Numeric(18, 2), nullable=True),
        sa.Column("original_currency_code", sa.CHAR(3), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("source_kind", sa.String(), nullable=False),
        sa.Column("source_package", sa.String(), nullable=True),
        sa.Column("posted_at_ms", sa.BigInteger(), nullable=False),
        sa.Column(
            "credits_earned",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "is_deleted",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("amount > 0", name="ck_nc_tx_amount_positive"),
        sa.CheckConstraint("type in ('EXPENSE','INCOME')", name="ck_nc_tx_type"),
        sa.CheckConstraint(
            "source_kind in ('NOTIFICATION','SMS')", name="ck_nc_tx_source_kind"
        ),
        sa.CheckConstraint(
            "(original_amount IS NULL) = (original_currency_code IS NULL)",
            name="ck_nc_tx_original_pair",
        ),
    )

    # Recent-window lookups filter by source and time, newest first.
    op.create_index(
        "ix_nc_tx_source_posted",
        "nc_transactions",
        ["source_kind", "posted_at_ms"],
    )


def downgrade() -> None:
    op.drop_index("ix_nc_tx_source_posted", table_name="nc_transactions")
    op.drop_table("nc_transactions")
