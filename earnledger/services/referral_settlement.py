"""Referral Settlement — pays the pending referral bonus of a referred user, at most once.

Invariants:
    - Only a PENDING referral is ever settled; PAID and BLOCKED are terminal
    - status=paid, reward and the referrer's balance_referral credit commit together
    - The pending -> paid move is a compare-and-set; only the winning caller credits
    - Missing referrer: status still moves to paid, credit skipped, warning logged
    - Never asks "was this the first task" — the status alone gates settlement

Design Decisions:
    - Reward resolved from the referral's stored country (captured at registration),
      not the referred user's current country
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from earnledger.core.domain_types import (
    BalanceBucket, ReferralId, ReferralStatus, UserId,
)
from earnledger.core.enforce_lifecycle import check_referral_transition
from earnledger.core.errors import (
    ErrorContext, InvalidStateTransitionError, ResourceNotFoundError,
)
from earnledger.core.repository_protocols import LedgerStore, ReferralRecord
from earnledger.core.settlement_rules import resolve_referral_reward

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settlement:
    """A referral that this call moved from pending to paid."""
    referral_id: ReferralId
    referrer_id: UserId
    reward: Decimal
    referrer_credited: bool


class ReferralSettlement:
    """Referral FSM driver: settle on completion, block on admin request."""

    def __init__(self, store: LedgerStore, default_reward: Decimal):
        self.store = store
        self.default_reward = default_reward

    async def on_task_completed(self, user_id: UserId) -> Settlement | None:
        """Settle the user's pending referral, if any. No-op otherwise."""
        referral = await self.store.get_pending_referral(user_id)
        if referral is None:
            return None

        setting = await self.store.get_referral_setting(referral.country)
        reward = resolve_referral_reward(
            setting.reward_amount if setting else None, self.default_reward,
        )

        async with self.store.transaction():
            won = await self.store.transition_referral(
                referral.id, ReferralStatus.PENDING, ReferralStatus.PAID, reward,
            )
            if not won:
                logger.info(
                    "Referral already settled by a concurrent completion",
                    extra={"referral_id": referral.id, "user_id": user_id},
                )
                return None
            credited = await self.store.increment_balance(
                referral.referrer_id, BalanceBucket.REFERRAL, reward,
            )

        if credited:
            logger.info(
                "Referral settled",
                extra={
                    "referral_id": referral.id, "referrer_id": referral.referrer_id,
                    "user_id": user_id, "reward": reward,
                },
            )
        else:
            logger.warning(
                "Referral marked paid but referrer is missing; credit skipped",
                extra={
                    "referral_id": referral.id, "referrer_id": referral.referrer_id,
                    "reward": reward,
                },
            )
        return Settlement(
            referral_id=ReferralId(referral.id),
            referrer_id=UserId(referral.referrer_id),
            reward=reward,
            referrer_credited=credited,
        )

    async def block_referral(self, referral_id: ReferralId) -> ReferralRecord:
        """Admin: pending -> blocked. The referrer will never be paid for it."""
        ctx = ErrorContext(referral_id=referral_id)
        referral = await self.store.get_referral(referral_id)
        if referral is None:
            raise ResourceNotFoundError("Referral", str(referral_id), ctx)
        check_referral_transition(
            ReferralStatus(referral.status), ReferralStatus.BLOCKED, ctx,
        )

        async with self.store.transaction():
            won = await self.store.transition_referral(
                referral_id, ReferralStatus.PENDING, ReferralStatus.BLOCKED,
            )
            if not won:
                raise InvalidStateTransitionError(
                    "Referral", "settled", ReferralStatus.BLOCKED.value, ctx,
                )

        logger.info("Referral blocked", extra={"referral_id": referral_id})
        return referral
