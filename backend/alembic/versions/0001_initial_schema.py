"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-01-06 09:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_DAYS = sa.Numeric(precision=8, scale=2)
_SHORT_DAYS = sa.Numeric(precision=6, scale=2)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "leave_type",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("key", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("accrues", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_type_key", "leave_type", ["key"], unique=True)

    op.create_table(
        "holiday",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_optional", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_holiday_date"),
    )
    op.create_index("ix_holiday_date", "holiday", ["date"])

    op.create_table(
        "leave_balance",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), sa.ForeignKey("leave_type.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("allocated_days", _DAYS, nullable=False),
        sa.Column("used_days", _DAYS, nullable=False),
        sa.Column("carry_forward_from_previous_year", _DAYS, nullable=False),
        sa.Column("monthly_credit_rate", _DAYS, nullable=False),
        sa.Column("last_credited_period", sa.String(length=7), nullable=True),
        sa.Column("anniversary_processed_on", sa.Date(), nullable=True),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_balance_employee_type_year"),
    )
    op.create_index("ix_leave_balance_employee_id", "leave_balance", ["employee_id"])
    op.create_index("ix_leave_balance_leave_type_id", "leave_balance", ["leave_type_id"])

    op.create_table(
        "leave_balance_adjustment",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("balance_id", sa.Uuid(), sa.ForeignKey("leave_balance.id"), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("adjustment_type", sa.String(length=20), nullable=False),
        sa.Column("amount", _DAYS, nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("previous_allocated", _DAYS, nullable=False),
        sa.Column("new_allocated", _DAYS, nullable=False),
        sa.Column("adjusted_by", sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_balance_adjustment_balance_id", "leave_balance_adjustment", ["balance_id"])
    op.create_index("ix_adjustment_employee_created", "leave_balance_adjustment", ["employee_id", "created_at"])

    op.create_table(
        "leave_application",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type_id", sa.Uuid(), sa.ForeignKey("leave_type.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days_count", _SHORT_DAYS, nullable=False),
        sa.Column("is_half_day", sa.Boolean(), nullable=False),
        sa.Column("half_day_period", sa.String(length=20), nullable=True),
        sa.Column("lop_days", _SHORT_DAYS, nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("approver_comments", sa.String(), nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decided_by", sa.Uuid(), nullable=True),
        sa.Column("sandwich_deducted_days", _SHORT_DAYS, nullable=True),
        sa.Column("sandwich_extra_days", _SHORT_DAYS, nullable=True),
        sa.Column("is_sandwich_leave", sa.Boolean(), nullable=True),
        sa.Column("sandwich_reason", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_application_employee_id", "leave_application", ["employee_id"])
    op.create_index("ix_leave_application_leave_type_id", "leave_application", ["leave_type_id"])
    op.create_index("ix_leave_application_start_date", "leave_application", ["start_date"])
    op.create_index("ix_application_employee_status", "leave_application", ["employee_id", "status"])

    op.create_table(
        "sandwich_bridge",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("bearer_application_id", sa.Uuid(), sa.ForeignKey("leave_application.id"), nullable=False),
        sa.Column("partner_application_id", sa.Uuid(), sa.ForeignKey("leave_application.id"), nullable=False),
        sa.Column("bridged_days", _SHORT_DAYS, nullable=False),
        sa.Column("first_bridged_date", sa.Date(), nullable=False),
        sa.Column("last_bridged_date", sa.Date(), nullable=False),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sandwich_bridge_bearer_application_id", "sandwich_bridge", ["bearer_application_id"])
    op.create_index("ix_sandwich_bridge_partner_application_id", "sandwich_bridge", ["partner_application_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("sandwich_bridge")
    op.drop_table("leave_application")
    op.drop_table("leave_balance_adjustment")
    op.drop_table("leave_balance")
    op.drop_table("holiday")
    op.drop_table("leave_type")
