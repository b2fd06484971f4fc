"""Callback Gateway — entry point for advertiser-network postbacks.

Invariants:
    - Missing or non-numeric user_id/task_id -> ValidationError (HTTP 400)
    - Reward = payout, else the task's reward_amount, else the configured default
    - Completion Recorder runs first, Referral Settlement runs after it on every
      accepted postback, duplicates included (settlement is a no-op once paid)
    - Every accepted postback is answered 200; the text only distinguishes
      "OK" from "OK - Already Completed" for observability
    - Store failures propagate (503) so the network retries later

Design Decisions:
    - Unknown user: logged and answered "OK" — nothing the network can fix
    - No payout: the task row's own reward_amount is credited, not a flat
      0.50 for every task; the flat default only covers a task_id with no row,
      so admins price offers per task
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from earnledger.core.domain_types import CompletionOutcome
from earnledger.core.errors import ResourceNotFoundError
from earnledger.core.repository_protocols import LedgerStore
from earnledger.core.settlement_rules import parse_postback, resolve_task_reward
from earnledger.services.completion_recorder import CompletionRecorder
from earnledger.services.referral_settlement import ReferralSettlement, Settlement

logger = logging.getLogger(__name__)

RESPONSE_OK = "OK"
RESPONSE_ALREADY_COMPLETED = "OK - Already Completed"


@dataclass(frozen=True)
class PostbackResult:
    outcome: CompletionOutcome
    settlement: Settlement | None = None

    @property
    def response_text(self) -> str:
        if self.outcome == CompletionOutcome.ALREADY_COMPLETED:
            return RESPONSE_ALREADY_COMPLETED
        return RESPONSE_OK


class CallbackGateway:
    """Orchestrates Recorder + Settlement for one postback."""

    def __init__(
        self,
        store: LedgerStore,
        recorder: CompletionRecorder,
        settlement: ReferralSettlement,
        default_payout: Decimal,
    ):
        self.store = store
        self.recorder = recorder
        self.settlement = settlement
        self.default_payout = default_payout

    async def handle(
        self,
        user_id: str | None,
        task_id: str | None,
        payout: str | None = None,
        transaction_id: str | None = None,
    ) -> PostbackResult:
        params = parse_postback(user_id, task_id, payout, transaction_id)

        task = await self.store.get_task(params.task_id)
        reward = resolve_task_reward(
            params.payout, task.reward_amount if task else None,
            self.default_payout,
        )

        try:
            outcome = await self.recorder.complete_task(
                params.user_id, params.task_id, reward, params.transaction_id,
            )
        except ResourceNotFoundError:
            logger.warning(
                "Postback for unknown user ignored",
                extra={
                    "user_id": params.user_id, "task_id": params.task_id,
                    "transaction_id": params.transaction_id,
                },
            )
            return PostbackResult(CompletionOutcome.UNKNOWN_USER)

        settlement = await self.settlement.on_task_completed(params.user_id)
        return PostbackResult(outcome, settlement)
