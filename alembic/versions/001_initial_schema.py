"""Initial schema — users, tasks, completions, referrals, withdrawals, announcements.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("country", sa.String(64), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column("referred_by", sa.Integer, nullable=True),
        sa.Column("balance_task", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("balance_referral", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("role", sa.String(10), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("referral_code", name="uq_users_referral_code"),
        sa.CheckConstraint("balance_task >= 0", name="ck_users_balance_task_non_negative"),
        sa.CheckConstraint(
            "balance_referral >= 0", name="ck_users_balance_referral_non_negative",
        ),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("country", sa.String(64), nullable=False),
        sa.Column("smart_link", sa.Text, nullable=False),
        sa.Column("tag_name", sa.String(200), nullable=False),
        sa.Column("reward_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.CheckConstraint("reward_amount > 0", name="ck_tasks_reward_amount_positive"),
    )
    op.create_index("ix_tasks_country", "tasks", ["country"])

    # No foreign keys: completions outlive deleted tasks
    op.create_table(
        "completed_tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("task_id", sa.Integer, nullable=False),
        sa.Column("transaction_id", sa.String(255), nullable=True),
        sa.Column("reward_earned", sa.Numeric(10, 2), nullable=False),
        _created_at("completed_at"),
        sa.UniqueConstraint("user_id", "task_id", name="uq_completed_tasks_user_task"),
    )
    op.create_index("ix_completed_tasks_user_id", "completed_tasks", ["user_id"])

    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("referrer_id", sa.Integer, nullable=False),
        sa.Column("referred_user_id", sa.Integer, nullable=False),
        sa.Column("country", sa.String(64), nullable=False),
        sa.Column("reward", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("status", sa.String(10), nullable=False, server_default="pending"),
        _created_at(),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("referred_user_id", name="uq_referrals_referred_user_id"),
    )
    op.create_index("ix_referrals_referrer_id", "referrals", ["referrer_id"])

    op.create_table(
        "referral_settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("country", sa.String(64), nullable=False),
        sa.Column("reward_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("min_withdrawal", sa.Numeric(10, 2), nullable=False, server_default="20.00"),
        _created_at("updated_at"),
        sa.UniqueConstraint("country", name="uq_referral_settings_country"),
    )

    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("wallet_address", sa.Text, nullable=False),
        sa.Column("network", sa.String(10), nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="pending"),
        sa.Column("debited_task", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("debited_referral", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        _created_at(),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_withdrawals_amount_positive"),
    )
    op.create_index("ix_withdrawals_user_id", "withdrawals", ["user_id"])

    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("country", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )


def downgrade() -> None:
    op.drop_table("announcements")
    op.drop_index("ix_withdrawals_user_id", table_name="withdrawals")
    op.drop_table("withdrawals")
    op.drop_table("referral_settings")
    op.drop_index("ix_referrals_referrer_id", table_name="referrals")
    op.drop_table("referrals")
    op.drop_index("ix_completed_tasks_user_id", table_name="completed_tasks")
    op.drop_table("completed_tasks")
    op.drop_index("ix_tasks_country", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("users")
