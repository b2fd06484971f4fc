"""Completion Recorder — records a (user, task) completion exactly once and credits balance_task.

Invariants:
    - Insert of CompletedTask and the balance_task increment commit together or not at all
    - The unique constraint on (user_id, task_id) is the only "already done" test:
      the insert is attempted first, a collision suppresses the credit
    - A duplicate is success (ALREADY_COMPLETED), never an error
    - Unknown user -> whole unit rolled back, ResourceNotFoundError

Design Decisions:
    - No SELECT before the insert: a read-then-write check races under
      concurrent postback delivery
"""

import logging
from decimal import Decimal

from earnledger.core.domain_types import (
    BalanceBucket, CompletionOutcome, TaskId, UserId, ZERO, to_money,
)
from earnledger.core.errors import (
    DuplicateCompletionError, ErrorContext, ResourceNotFoundError, ValidationError,
)
from earnledger.core.repository_protocols import LedgerStore

logger = logging.getLogger(__name__)


class CompletionRecorder:
    """Idempotent completion + task-balance credit."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def complete_task(
        self,
        user_id: UserId,
        task_id: TaskId,
        reward_amount: Decimal,
        transaction_id: str | None = None,
    ) -> CompletionOutcome:
        reward = to_money(reward_amount)
        ctx = ErrorContext(user_id=user_id, task_id=task_id)
        if reward <= ZERO:
            raise ValidationError("Reward must be positive", "reward_amount", ctx)

        try:
            async with self.store.transaction():
                await self.store.insert_completion(
                    user_id, task_id, reward, transaction_id,
                )
                credited = await self.store.increment_balance(
                    user_id, BalanceBucket.TASK, reward,
                )
                if not credited:
                    raise ResourceNotFoundError("User", str(user_id), ctx)
        except DuplicateCompletionError:
            logger.info(
                "Duplicate completion ignored",
                extra={
                    "user_id": user_id, "task_id": task_id,
                    "transaction_id": transaction_id,
                },
            )
            return CompletionOutcome.ALREADY_COMPLETED

        logger.info(
            "Task completion recorded",
            extra={
                "user_id": user_id, "task_id": task_id,
                "transaction_id": transaction_id, "reward": reward,
            },
        )
        return CompletionOutcome.RECORDED
