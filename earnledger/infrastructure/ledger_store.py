"""Ledger Store — SQLAlchemy implementation of the LedgerStore protocol.

Invariants:
    - Balance changes are single UPDATE statements computed in SQL (x = x + :delta),
      never read-modify-write in Python
    - insert_completion relies on uq_completed_tasks_user_task; a unique violation
      becomes DuplicateCompletionError, any other IntegrityError propagates
    - Status transitions are compare-and-set: UPDATE ... WHERE status = :current,
      the boolean result says whether this caller won
    - transaction() is the only place that commits

Design Decisions:
    - One store object per AsyncSession (per request): no shared state across workers
    - Read-side listing queries live here too, so routes never build SQL
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from earnledger.core.domain_types import (
    BalanceBucket, ReferralStatus, WithdrawalStatus,
)
from earnledger.core.errors import DuplicateCompletionError
from earnledger.infrastructure.database import is_unique_violation
from earnledger.models.announcement import Announcement
from earnledger.models.completed_task import CompletedTask
from earnledger.models.referral import Referral
from earnledger.models.referral_setting import ReferralSetting
from earnledger.models.task import Task
from earnledger.models.user import User
from earnledger.models.withdrawal import Withdrawal


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlLedgerStore:
    """LedgerStore over one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit on clean exit, roll back on any exception."""
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    # ─── Users ───────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.username == username),
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_referral_code(self, code: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.referral_code == code),
        )
        return result.scalar_one_or_none()

    async def add_user(self, **fields: object) -> User:
        user = User(**fields)
        self.db.add(user)
        await self.db.flush()
        return user

    async def list_users(self) -> Sequence[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc()),
        )
        return result.scalars().all()

    async def update_user(self, user_id: int, **fields: object) -> bool:
        if not fields:
            return await self.get_user(user_id) is not None
        result = await self.db.execute(
            update(User).where(User.id == user_id).values(**fields),
        )
        return result.rowcount == 1

    async def increment_balance(
        self, user_id: int, bucket: BalanceBucket, amount: Decimal,
    ) -> bool:
        """Atomically add amount to one balance column. False if no such user."""
        column = getattr(User, bucket.value)
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values({column: column + amount}),
        )
        return result.rowcount == 1

    async def debit_balances(
        self, user_id: int, from_task: Decimal, from_referral: Decimal,
    ) -> bool:
        """Atomically subtract from both buckets, only if neither goes negative."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .where(User.balance_task >= from_task)
            .where(User.balance_referral >= from_referral)
            .values({
                User.balance_task: User.balance_task - from_task,
                User.balance_referral: User.balance_referral - from_referral,
            }),
        )
        return result.rowcount == 1

    # ─── Tasks & completions ─────────────────────────────────────

    async def get_task(self, task_id: int) -> Task | None:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def add_task(self, **fields: object) -> Task:
        task = Task(**fields)
        self.db.add(task)
        await self.db.flush()
        return task

    async def delete_task(self, task_id: int) -> bool:
        result = await self.db.execute(delete(Task).where(Task.id == task_id))
        return result.rowcount == 1

    async def list_tasks(self) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task).order_by(Task.created_at.desc(), Task.id.desc()),
        )
        return result.scalars().all()

    async def list_active_tasks(self, country: str) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.country == country)
            .where(Task.is_active.is_(True))
            .order_by(Task.id),
        )
        return result.scalars().all()

    async def completed_task_ids(self, user_id: int) -> set[int]:
        result = await self.db.execute(
            select(CompletedTask.task_id).where(CompletedTask.user_id == user_id),
        )
        return set(result.scalars().all())

    async def insert_completion(
        self, user_id: int, task_id: int, reward: Decimal,
        transaction_id: str | None,
    ) -> None:
        """Insert the completion row. The unique constraint is the guard."""
        self.db.add(CompletedTask(
            user_id=user_id,
            task_id=task_id,
            reward_earned=reward,
            transaction_id=transaction_id,
        ))
        try:
            await self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateCompletionError(user_id, task_id) from e
            raise

    # ─── Referrals ───────────────────────────────────────────────

    async def add_referral(
        self, referrer_id: int, referred_user_id: int, country: str,
    ) -> Referral:
        referral = Referral(
            referrer_id=referrer_id,
            referred_user_id=referred_user_id,
            country=country,
            reward=Decimal("0.00"),
            status=ReferralStatus.PENDING.value,
        )
        self.db.add(referral)
        await self.db.flush()
        return referral

    async def get_referral(self, referral_id: int) -> Referral | None:
        result = await self.db.execute(
            select(Referral).where(Referral.id == referral_id),
        )
        return result.scalar_one_or_none()

    async def get_referral_by_referred(self, referred_user_id: int) -> Referral | None:
        result = await self.db.execute(
            select(Referral).where(Referral.referred_user_id == referred_user_id),
        )
        return result.scalar_one_or_none()

    async def get_pending_referral(self, referred_user_id: int) -> Referral | None:
        result = await self.db.execute(
            select(Referral)
            .where(Referral.referred_user_id == referred_user_id)
            .where(Referral.status == ReferralStatus.PENDING.value),
        )
        return result.scalar_one_or_none()

    async def list_referrals_by_referrer(self, referrer_id: int) -> Sequence[Referral]:
        result = await self.db.execute(
            select(Referral)
            .where(Referral.referrer_id == referrer_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc()),
        )
        return result.scalars().all()

    async def transition_referral(
        self, referral_id: int, current: ReferralStatus, target: ReferralStatus,
        reward: Decimal | None = None,
    ) -> bool:
        """Compare-and-set the status. True only for the caller that moved it."""
        values: dict = {"status": target.value, "settled_at": _now()}
        if reward is not None:
            values["reward"] = reward
        result = await self.db.execute(
            update(Referral)
            .where(Referral.id == referral_id)
            .where(Referral.status == current.value)
            .values(**values),
        )
        return result.rowcount == 1

    async def get_referral_setting(self, country: str) -> ReferralSetting | None:
        result = await self.db.execute(
            select(ReferralSetting).where(ReferralSetting.country == country),
        )
        return result.scalar_one_or_none()

    async def list_referral_settings(self) -> Sequence[ReferralSetting]:
        result = await self.db.execute(
            select(ReferralSetting).order_by(ReferralSetting.country),
        )
        return result.scalars().all()

    async def upsert_referral_setting(
        self, country: str, reward_amount: Decimal, min_withdrawal: Decimal,
    ) -> ReferralSetting:
        setting = await self.get_referral_setting(country)
        if setting is None:
            setting = ReferralSetting(country=country)
            self.db.add(setting)
        setting.reward_amount = reward_amount
        setting.min_withdrawal = min_withdrawal
        setting.updated_at = _now()
        await self.db.flush()
        return setting

    # ─── Withdrawals ─────────────────────────────────────────────

    async def add_withdrawal(
        self, user_id: int, amount: Decimal, wallet_address: str, network: str,
        debited_task: Decimal, debited_referral: Decimal,
    ) -> Withdrawal:
        withdrawal = Withdrawal(
            user_id=user_id,
            amount=amount,
            wallet_address=wallet_address,
            network=network,
            status=WithdrawalStatus.PENDING.value,
            debited_task=debited_task,
            debited_referral=debited_referral,
        )
        self.db.add(withdrawal)
        await self.db.flush()
        return withdrawal

    async def get_withdrawal(self, withdrawal_id: int) -> Withdrawal | None:
        result = await self.db.execute(
            select(Withdrawal).where(Withdrawal.id == withdrawal_id),
        )
        return result.scalar_one_or_none()

    async def list_withdrawals(self, user_id: int) -> Sequence[Withdrawal]:
        result = await self.db.execute(
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()),
        )
        return result.scalars().all()

    async def list_all_withdrawals(self) -> list[tuple[Withdrawal, str, str]]:
        """Every withdrawal with the requester's username and country."""
        result = await self.db.execute(
            select(Withdrawal, User.username, User.country)
            .join(User, User.id == Withdrawal.user_id)
            .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()),
        )
        return [(w, username, country) for w, username, country in result.all()]

    async def transition_withdrawal(
        self, withdrawal_id: int, current: WithdrawalStatus,
        target: WithdrawalStatus,
    ) -> bool:
        result = await self.db.execute(
            update(Withdrawal)
            .where(Withdrawal.id == withdrawal_id)
            .where(Withdrawal.status == current.value)
            .values(status=target.value, decided_at=_now()),
        )
        return result.rowcount == 1

    # ─── Announcements ───────────────────────────────────────────

    async def list_announcements(self, country: str | None = None) -> Sequence[Announcement]:
        query = select(Announcement).where(Announcement.is_active.is_(True))
        if country is not None:
            query = query.where(
                (Announcement.country.is_(None)) | (Announcement.country == country),
            )
        result = await self.db.execute(
            query.order_by(Announcement.created_at.desc(), Announcement.id.desc()),
        )
        return result.scalars().all()

    async def add_announcement(
        self, content: str, country: str | None, is_active: bool = True,
    ) -> Announcement:
        announcement = Announcement(
            content=content, country=country, is_active=is_active,
        )
        self.db.add(announcement)
        await self.db.flush()
        return announcement

    async def delete_announcement(self, announcement_id: int) -> bool:
        result = await self.db.execute(
            delete(Announcement).where(Announcement.id == announcement_id),
        )
        return result.rowcount == 1
