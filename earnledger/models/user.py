"""User ORM — account record that exclusively owns its two balances.

Invariants:
    - username, email, referral_code are unique
    - referral_code is immutable after creation
    - balance_task >= 0 and balance_referral >= 0 (CHECK constraints back the service guards)
    - Balances change only through atomic UPDATE ... SET x = x + :delta statements

Design Decisions:
    - referred_by is a plain integer, not a relationship: referrals are facts
      that reference users, never an ownership edge
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    String, Text, Integer, Boolean, DateTime, Numeric, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from earnledger.db.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance_task >= 0", name="balance_task_non_negative"),
        CheckConstraint("balance_referral >= 0", name="balance_referral_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(String(64), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    referral_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    referred_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    balance_task: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )
    balance_referral: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )
    role: Mapped[str] = mapped_column(String(10), nullable=False, default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
