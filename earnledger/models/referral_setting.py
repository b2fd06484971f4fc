"""ReferralSetting ORM — per-country referral reward and withdrawal minimum.

Invariants:
    - One row per country (UNIQUE); absence means defaults from Settings
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from earnledger.db.base import Base


class ReferralSetting(Base):
    __tablename__ = "referral_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    reward_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    min_withdrawal: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("20.00"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
