"""Withdrawal Schemas — request, admin decision, and listings."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from earnledger.core.domain_types import WithdrawalNetwork, WithdrawalStatus


class WithdrawalCreate(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    wallet_address: str = Field(min_length=1, max_length=255)
    network: WithdrawalNetwork


class WithdrawalDecision(BaseModel):
    status: WithdrawalStatus


class WithdrawalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    wallet_address: str
    network: str
    status: str
    debited_task: Decimal
    debited_referral: Decimal
    created_at: datetime
    decided_at: datetime | None = None


class AdminWithdrawalResponse(WithdrawalResponse):
    username: str
    country: str
