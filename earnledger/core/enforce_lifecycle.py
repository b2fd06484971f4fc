"""Lifecycle Enforcement — explicit state machines for referrals and withdrawals.

Invariants:
    - Referral: pending -> paid | blocked; paid and blocked are terminal
    - Withdrawal: pending -> approved | rejected; approved and rejected are terminal
    - No transition ever moves a record back to pending
    - check_* functions are PURE: they raise, they never mutate

Design Decisions:
    - Transition tables as dicts of frozensets: the table is the documentation
    - The store still applies each transition as a conditional UPDATE
      (WHERE status = current); these checks only produce the error
"""

from earnledger.core.domain_types import ReferralStatus, WithdrawalStatus
from earnledger.core.errors import InvalidStateTransitionError, ErrorContext


REFERRAL_TRANSITIONS: dict[ReferralStatus, frozenset[ReferralStatus]] = {
    ReferralStatus.PENDING: frozenset({ReferralStatus.PAID, ReferralStatus.BLOCKED}),
    ReferralStatus.PAID: frozenset(),
    ReferralStatus.BLOCKED: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset({
        WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED,
    }),
    WithdrawalStatus.APPROVED: frozenset(),
    WithdrawalStatus.REJECTED: frozenset(),
}


def can_transition_referral(current: ReferralStatus, target: ReferralStatus) -> bool:
    return target in REFERRAL_TRANSITIONS[current]


def can_transition_withdrawal(
    current: WithdrawalStatus, target: WithdrawalStatus,
) -> bool:
    return target in WITHDRAWAL_TRANSITIONS[current]


def check_referral_transition(
    current: ReferralStatus, target: ReferralStatus,
    context: ErrorContext | None = None,
) -> None:
    """Raise InvalidStateTransitionError unless current -> target is legal."""
    if not can_transition_referral(current, target):
        raise InvalidStateTransitionError(
            "Referral", current.value, target.value, context,
        )


def check_withdrawal_transition(
    current: WithdrawalStatus, target: WithdrawalStatus,
    context: ErrorContext | None = None,
) -> None:
    """Raise InvalidStateTransitionError unless current -> target is legal."""
    if not can_transition_withdrawal(current, target):
        raise InvalidStateTransitionError(
            "Withdrawal", current.value, target.value, context,
        )
