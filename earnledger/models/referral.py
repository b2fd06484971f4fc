"""Referral ORM — pending bonus owed to a referrer until the referred user completes a task.

Invariants:
    - At most one referral per referred_user_id (UNIQUE)
    - country is the referred user's country captured at registration
    - status transitions pending -> paid | blocked only (core/enforce_lifecycle.py)
    - reward stays 0 until settlement writes it, exactly once
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from earnledger.db.base import Base


class Referral(Base):
    __tablename__ = "referrals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referrer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    referred_user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    country: Mapped[str] = mapped_column(String(64), nullable=False)
    reward: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    settled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
