"""Withdrawal Guard — validates, debits and decides wallet withdrawals.

Invariants:
    - amount < country min_withdrawal -> ValidationError, no row, no debit
    - amount > balance_task + balance_referral -> InsufficientBalanceError, no row, no debit
    - Debit (task bucket first, then referral) and the pending Withdrawal insert
      commit together
    - The debit is a conditional UPDATE, so concurrent requests cannot overspend
    - pending -> approved keeps the debit; pending -> rejected refunds the stored split
    - A decided withdrawal is terminal

Design Decisions:
    - Deduct on request rather than on approval: pending withdrawals can never
      add up to more than the user held
"""

import logging
from decimal import Decimal

from earnledger.core.domain_types import (
    BalanceBucket, Identity, WithdrawalId, WithdrawalNetwork, WithdrawalStatus,
    ZERO, to_money,
)
from earnledger.core.enforce_lifecycle import check_withdrawal_transition
from earnledger.core.enforce_withdrawal import check_withdrawal_request, plan_debit
from earnledger.core.errors import (
    ErrorContext, InsufficientBalanceError, InvalidStateTransitionError,
    ResourceNotFoundError, ValidationError,
)
from earnledger.core.repository_protocols import LedgerStore, WithdrawalRecord
from earnledger.core.settlement_rules import resolve_min_withdrawal

logger = logging.getLogger(__name__)


class WithdrawalGuard:
    """User-side request and admin-side decision for withdrawals."""

    def __init__(self, store: LedgerStore, default_min_withdrawal: Decimal):
        self.store = store
        self.default_min_withdrawal = default_min_withdrawal

    async def request_withdrawal(
        self,
        identity: Identity,
        amount: Decimal,
        wallet_address: str,
        network: WithdrawalNetwork,
    ) -> WithdrawalRecord:
        ctx = ErrorContext(user_id=identity.user_id)
        user = await self.store.get_user(identity.user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(identity.user_id), ctx)

        setting = await self.store.get_referral_setting(identity.country)
        minimum = resolve_min_withdrawal(
            setting.min_withdrawal if setting else None,
            self.default_min_withdrawal,
        )
        amount = to_money(amount)
        balance_task = to_money(user.balance_task)
        balance_referral = to_money(user.balance_referral)
        check_withdrawal_request(
            amount, minimum, balance_task, balance_referral, identity.country, ctx,
        )
        plan = plan_debit(amount, balance_task, balance_referral)

        async with self.store.transaction():
            debited = await self.store.debit_balances(
                identity.user_id, plan.from_task, plan.from_referral,
            )
            if not debited:
                # balances moved between the read and the conditional debit
                raise InsufficientBalanceError(
                    str(amount), str(balance_task + balance_referral), ctx,
                )
            withdrawal = await self.store.add_withdrawal(
                user_id=identity.user_id,
                amount=amount,
                wallet_address=wallet_address,
                network=network.value,
                debited_task=plan.from_task,
                debited_referral=plan.from_referral,
            )

        logger.info(
            "Withdrawal requested",
            extra={
                "user_id": identity.user_id, "withdrawal_id": withdrawal.id,
                "amount": amount,
            },
        )
        return withdrawal

    async def decide_withdrawal(
        self, withdrawal_id: WithdrawalId, target: WithdrawalStatus,
    ) -> WithdrawalRecord:
        """Admin: approve or reject a pending withdrawal exactly once."""
        ctx = ErrorContext(withdrawal_id=withdrawal_id)
        if target == WithdrawalStatus.PENDING:
            raise ValidationError(
                "A withdrawal can only be approved or rejected", "status", ctx,
            )
        withdrawal = await self.store.get_withdrawal(withdrawal_id)
        if withdrawal is None:
            raise ResourceNotFoundError("Withdrawal", str(withdrawal_id), ctx)
        check_withdrawal_transition(
            WithdrawalStatus(withdrawal.status), target, ctx,
        )

        refunded = True
        async with self.store.transaction():
            won = await self.store.transition_withdrawal(
                withdrawal_id, WithdrawalStatus.PENDING, target,
            )
            if not won:
                raise InvalidStateTransitionError(
                    "Withdrawal", "decided", target.value, ctx,
                )
            if target == WithdrawalStatus.REJECTED:
                refunded = await self._refund(withdrawal)

        if not refunded:
            logger.warning(
                "Withdrawal rejected but owner is missing; refund skipped",
                extra={"withdrawal_id": withdrawal_id, "user_id": withdrawal.user_id},
            )
        logger.info(
            f"Withdrawal {target.value}",
            extra={"withdrawal_id": withdrawal_id, "user_id": withdrawal.user_id},
        )
        return withdrawal

    async def _refund(self, withdrawal: WithdrawalRecord) -> bool:
        ok = True
        if withdrawal.debited_task > ZERO:
            ok = await self.store.increment_balance(
                withdrawal.user_id, BalanceBucket.TASK, withdrawal.debited_task,
            ) and ok
        if withdrawal.debited_referral > ZERO:
            ok = await self.store.increment_balance(
                withdrawal.user_id, BalanceBucket.REFERRAL,
                withdrawal.debited_referral,
            ) and ok
        return ok
