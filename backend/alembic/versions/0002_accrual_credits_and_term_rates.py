"""accrual credits and employment term rates

Revision ID: 0002
Revises: 0001
Create Date: 2025-02-03 10:30:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "accrual_credit",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("balance_id", sa.Uuid(), sa.ForeignKey("leave_balance.id"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("period", sa.String(length=7), nullable=False),
        sa.Column("amount", sa.Numeric(precision=8, scale=2), nullable=False),
        sa.Column("rate_source", sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("balance_id", "period", name="uq_accrual_credit_balance_period"),
    )
    op.create_index("ix_accrual_credit_balance_id", "accrual_credit", ["balance_id"])
    op.create_index("ix_accrual_credit_employee_id", "accrual_credit", ["employee_id"])

    # Months credited before this table existed are known only through the
    # most recent marker; record that one so re-runs of it stay no-ops.
    op.execute(
        sa.text(
            "INSERT INTO accrual_credit (id, balance_id, employee_id, leave_type_id, period, amount, rate_source) "
            "SELECT id, id, employee_id, leave_type_id, last_credited_period, monthly_credit_rate, 'tenure' "
            "FROM leave_balance WHERE last_credited_period IS NOT NULL"
        )
    )

    op.create_table(
        "employment_term_rate",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employment_term", sa.String(length=30), nullable=False),
        sa.Column("monthly_rate", sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employment_term_rate_employment_term", "employment_term_rate", ["employment_term"], unique=True)


def downgrade() -> None:
    op.drop_table("employment_term_rate")
    op.drop_table("accrual_credit")
