"""User Schemas — registration input, account output, admin updates."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from earnledger.core.domain_types import Role


class RegisterRequest(BaseModel):
    """Account registration; referral_code is the referrer's code."""
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=128)
    country: str = Field(min_length=2, max_length=64)
    phone: str = Field(min_length=3, max_length=32)
    referral_code: str | None = Field(None, max_length=16)

    @field_validator("username", "email", "country", "phone")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    country: str
    phone: str
    referral_code: str
    referred_by: int | None
    balance_task: Decimal
    balance_referral: Decimal
    role: str
    is_active: bool
    created_at: datetime


class UserUpdate(BaseModel):
    """Admin patch: deactivate/reactivate an account or change its role."""
    is_active: bool | None = None
    role: Role | None = None
