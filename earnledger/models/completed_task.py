"""CompletedTask ORM — one row per (user, task) completion reported by postback.

Invariants:
    - (user_id, task_id) is UNIQUE: uq_completed_tasks_user_task
    - The insert of this row is the test-and-set for "already done"
    - reward_earned is the amount credited to balance_task in the same transaction

Design Decisions:
    - No foreign keys: an IntegrityError on insert can only mean a duplicate,
      and completions for deleted tasks remain as historical facts
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from earnledger.db.base import Base

COMPLETION_UNIQUE_CONSTRAINT = "uq_completed_tasks_user_task"


class CompletedTask(Base):
    __tablename__ = "completed_tasks"
    __table_args__ = (
        UniqueConstraint("user_id", "task_id", name=COMPLETION_UNIQUE_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    task_id: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reward_earned: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
