"""Boundary Protocols — the Ledger Store contract between services and persistence.

Invariants:
    - Services depend on LedgerStore, never on SQL or the ORM session directly
    - insert_completion raises DuplicateCompletionError on a (user, task) collision;
      it never pre-checks
    - increment_balance / debit_balances / transition_* are single atomic UPDATEs
      and report whether a row matched
    - transaction() commits everything since the last commit, or rolls it all back

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Record protocols expose only the attributes services read, so ORM rows
      satisfy them without adapters
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from earnledger.core.domain_types import (
    BalanceBucket, ReferralStatus, WithdrawalStatus,
)


class UserRecord(Protocol):
    id: int
    username: str
    country: str
    role: str
    is_active: bool
    referral_code: str
    referred_by: int | None
    balance_task: Decimal
    balance_referral: Decimal


class TaskRecord(Protocol):
    id: int
    country: str
    reward_amount: Decimal
    is_active: bool


class ReferralRecord(Protocol):
    id: int
    referrer_id: int
    referred_user_id: int
    country: str
    reward: Decimal
    status: str


class ReferralSettingRecord(Protocol):
    country: str
    reward_amount: Decimal
    min_withdrawal: Decimal


class WithdrawalRecord(Protocol):
    id: int
    user_id: int
    amount: Decimal
    status: str
    debited_task: Decimal
    debited_referral: Decimal
    created_at: datetime


class LedgerStore(Protocol):
    """Durable ledger entities with atomic per-row operations."""

    def transaction(self) -> AbstractAsyncContextManager[None]: ...

    # Users
    async def get_user(self, user_id: int) -> UserRecord | None: ...
    async def get_user_by_username(self, username: str) -> UserRecord | None: ...
    async def get_user_by_email(self, email: str) -> UserRecord | None: ...
    async def get_user_by_referral_code(self, code: str) -> UserRecord | None: ...
    async def add_user(self, **fields: object) -> UserRecord: ...
    async def increment_balance(
        self, user_id: int, bucket: BalanceBucket, amount: Decimal,
    ) -> bool: ...
    async def debit_balances(
        self, user_id: int, from_task: Decimal, from_referral: Decimal,
    ) -> bool: ...

    # Tasks and completions
    async def get_task(self, task_id: int) -> TaskRecord | None: ...
    async def insert_completion(
        self, user_id: int, task_id: int, reward: Decimal,
        transaction_id: str | None,
    ) -> None: ...

    # Referrals
    async def add_referral(
        self, referrer_id: int, referred_user_id: int, country: str,
    ) -> ReferralRecord: ...
    async def get_referral(self, referral_id: int) -> ReferralRecord | None: ...
    async def get_pending_referral(
        self, referred_user_id: int,
    ) -> ReferralRecord | None: ...
    async def transition_referral(
        self, referral_id: int, current: ReferralStatus, target: ReferralStatus,
        reward: Decimal | None = None,
    ) -> bool: ...
    async def get_referral_setting(
        self, country: str,
    ) -> ReferralSettingRecord | None: ...

    # Withdrawals
    async def add_withdrawal(
        self, user_id: int, amount: Decimal, wallet_address: str, network: str,
        debited_task: Decimal, debited_referral: Decimal,
    ) -> WithdrawalRecord: ...
    async def get_withdrawal(self, withdrawal_id: int) -> WithdrawalRecord | None: ...
    async def transition_withdrawal(
        self, withdrawal_id: int, current: WithdrawalStatus,
        target: WithdrawalStatus,
    ) -> bool: ...
