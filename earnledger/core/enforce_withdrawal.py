"""Withdrawal Rules — minimum, aggregate-balance check and per-bucket debit plan.

Invariants:
    - amount < country minimum -> ValidationError (checked before balance)
    - amount > balance_task + balance_referral -> InsufficientBalanceError
    - plan_debit draws the task bucket first, the referral bucket covers the rest
    - from_task + from_referral == amount, neither part negative nor above its bucket

Design Decisions:
    - Debit happens at request time; the plan is stored on the Withdrawal so a
      rejection refunds exactly the buckets it was taken from
"""

from dataclasses import dataclass
from decimal import Decimal

from earnledger.core.domain_types import ZERO, to_money
from earnledger.core.errors import (
    ValidationError, InsufficientBalanceError, ErrorContext,
)


@dataclass(frozen=True)
class DebitPlan:
    """How a withdrawal amount is split across the two balance buckets."""
    from_task: Decimal
    from_referral: Decimal

    @property
    def total(self) -> Decimal:
        return self.from_task + self.from_referral


def check_withdrawal_request(
    amount: Decimal,
    min_withdrawal: Decimal,
    balance_task: Decimal,
    balance_referral: Decimal,
    country: str,
    context: ErrorContext | None = None,
) -> None:
    """Raise if the request breaks the country minimum or the available total."""
    if amount <= ZERO:
        raise ValidationError("Amount must be positive", "amount", context)
    if amount < min_withdrawal:
        raise ValidationError(
            f"Minimum withdrawal for {country} is {min_withdrawal} USDT",
            "amount", context,
        )
    available = balance_task + balance_referral
    if amount > available:
        raise InsufficientBalanceError(str(amount), str(available), context)


def plan_debit(
    amount: Decimal, balance_task: Decimal, balance_referral: Decimal,
) -> DebitPlan:
    """Split amount: task bucket first, referral bucket for the remainder.

    Caller must have run check_withdrawal_request with the same balances.
    """
    amount = to_money(amount)
    from_task = min(amount, max(balance_task, ZERO))
    from_referral = amount - from_task
    if from_referral > balance_referral:
        raise InsufficientBalanceError(
            str(amount), str(balance_task + balance_referral),
        )
    return DebitPlan(from_task=to_money(from_task), from_referral=to_money(from_referral))
