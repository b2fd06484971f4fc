"""Lifecycle Enforcement — tests for referral and withdrawal state machines.

Tests cover:
    - pending is the only state with outgoing transitions
    - paid/blocked and approved/rejected are terminal
    - nothing moves back to pending
    - check_* raise InvalidStateTransitionError with the offending states
"""

import pytest

from earnledger.core.domain_types import ReferralStatus, WithdrawalStatus
from earnledger.core.enforce_lifecycle import (
    can_transition_referral,
    can_transition_withdrawal,
    check_referral_transition,
    check_withdrawal_transition,
)
from earnledger.core.errors import ErrorContext, InvalidStateTransitionError


# ─── Referral ────────────────────────────────────────────────────

def test_pending_referral_can_be_paid_or_blocked():
    assert can_transition_referral(ReferralStatus.PENDING, ReferralStatus.PAID)
    assert can_transition_referral(ReferralStatus.PENDING, ReferralStatus.BLOCKED)


@pytest.mark.parametrize("terminal", [ReferralStatus.PAID, ReferralStatus.BLOCKED])
@pytest.mark.parametrize("target", list(ReferralStatus))
def test_terminal_referral_states_have_no_exits(terminal, target):
    assert not can_transition_referral(terminal, target)


def test_referral_never_returns_to_pending():
    assert not can_transition_referral(ReferralStatus.PENDING, ReferralStatus.PENDING)


def test_check_referral_transition_raises_for_paid_to_blocked():
    ctx = ErrorContext(referral_id=9)
    with pytest.raises(InvalidStateTransitionError) as exc_info:
        check_referral_transition(ReferralStatus.PAID, ReferralStatus.BLOCKED, ctx)
    err = exc_info.value
    assert err.code == "INVALID_STATE_TRANSITION"
    assert err.http_status == 409
    assert err.current == "paid"
    assert err.target == "blocked"
    assert err.context.referral_id == 9


def test_check_referral_transition_passes_for_legal_move():
    check_referral_transition(ReferralStatus.PENDING, ReferralStatus.PAID)


# ─── Withdrawal ──────────────────────────────────────────────────

def test_pending_withdrawal_can_be_approved_or_rejected():
    assert can_transition_withdrawal(WithdrawalStatus.PENDING, WithdrawalStatus.APPROVED)
    assert can_transition_withdrawal(WithdrawalStatus.PENDING, WithdrawalStatus.REJECTED)


@pytest.mark.parametrize(
    "terminal", [WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED],
)
@pytest.mark.parametrize("target", list(WithdrawalStatus))
def test_terminal_withdrawal_states_have_no_exits(terminal, target):
    assert not can_transition_withdrawal(terminal, target)


def test_check_withdrawal_transition_raises_for_double_decision():
    with pytest.raises(InvalidStateTransitionError) as exc_info:
        check_withdrawal_transition(
            WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED,
        )
    assert "Withdrawal" in exc_info.value.message
