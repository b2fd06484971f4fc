"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, TaskId, ReferralId, WithdrawalId wrap ints — never mix them up in signatures
    - Money is Decimal quantized to 2 places (NUMERIC(10, 2) in the store)
    - External ids are ASCII digits within the INTEGER key range (parse_row_id)
    - All valid states encoded as Enums — no raw string matching
    - Identity is immutable and travels explicitly into every core call

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to the stored column values
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
TaskId = NewType("TaskId", int)
ReferralId = NewType("ReferralId", int)
WithdrawalId = NewType("WithdrawalId", int)


# ─── Money ───────────────────────────────────────────────────────

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_MONEY = Decimal("99999999.99")

# INTEGER primary keys in both stores are signed 32-bit.
MAX_ROW_ID = 2_147_483_647


def to_money(value: Decimal | str | int | float) -> Decimal:
    """Coerce to a 2-place Decimal. Raises ValueError on non-numeric input."""
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"not a finite amount: {value!r}")
        return amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"not a decimal amount: {value!r}") from e


def parse_row_id(raw: str) -> int:
    """ASCII base-10 id within the INTEGER key range. Raises ValueError otherwise."""
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError(f"not a numeric id: {raw!r}")
    value = int(raw)
    if value > MAX_ROW_ID:
        raise ValueError(f"id out of range: {raw!r}")
    return value


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account roles. Admin unlocks the /api/admin routes."""
    USER = "user"
    ADMIN = "admin"


class ReferralStatus(str, Enum):
    """Referral lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    PAID = "paid"
    BLOCKED = "blocked"


class WithdrawalStatus(str, Enum):
    """Withdrawal lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalNetwork(str, Enum):
    """Payout networks accepted for wallet withdrawals."""
    TRC20 = "TRC20"
    ERC20 = "ERC20"


class CompletionOutcome(str, Enum):
    """Result of recording a completion. Every outcome is answered 200 to the network."""
    RECORDED = "recorded"
    ALREADY_COMPLETED = "already_completed"
    UNKNOWN_USER = "unknown_user"


class BalanceBucket(str, Enum):
    """User balance columns that may be atomically incremented."""
    TASK = "balance_task"
    REFERRAL = "balance_referral"


# ─── Identity ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Identity:
    """Authenticated caller for one request."""
    user_id: UserId
    country: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
