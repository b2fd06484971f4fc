"""Referral Schemas — referral listing, stats and per-country settings."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ReferralResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    referrer_id: int
    referred_user_id: int
    country: str
    reward: Decimal
    status: str
    created_at: datetime
    settled_at: datetime | None = None


class ReferralStats(BaseModel):
    total_referrals: int
    paid_referrals: int
    pending_referrals: int
    total_earnings: Decimal


class ReferralSettingUpsert(BaseModel):
    country: str = Field(min_length=2, max_length=64)
    reward_amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    min_withdrawal: Decimal = Field(
        Decimal("20"), gt=0, max_digits=10, decimal_places=2,
    )


class ReferralSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    country: str
    reward_amount: Decimal
    min_withdrawal: Decimal
    updated_at: datetime
