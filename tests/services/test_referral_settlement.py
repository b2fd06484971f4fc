"""Referral Settlement — verifies the pending -> paid | blocked lifecycle.

Invariants:
    - First completion of a referred user pays the referrer the country reward
    - A paid or blocked referral is never paid again
    - Users without a referral settle nothing
    - Concurrent settlements pay exactly once
"""

import asyncio
from decimal import Decimal
from types import SimpleNamespace

import pytest

from earnledger.core.domain_types import ReferralId, ReferralStatus, UserId
from earnledger.core.errors import InvalidStateTransitionError, ResourceNotFoundError
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.models import Referral, User
from earnledger.services.referral_settlement import ReferralSettlement
from tests.services.seed import (
    fetch, seed_referral, seed_setting, seed_user,
)

DEFAULT_REWARD = Decimal("0.50")


@pytest.fixture
async def pair(test_db):
    referrer = await seed_user(test_db, "ref", country="USA")
    referred = await seed_user(test_db, "newbie", country="BRA", referred_by=referrer.id)
    referral = await seed_referral(test_db, referrer, referred)
    return referrer, referred, referral


async def test_settles_with_default_reward(test_db, store, pair):
    referrer, referred, referral = pair
    settlement = await ReferralSettlement(store, DEFAULT_REWARD).on_task_completed(
        UserId(referred.id),
    )

    assert settlement is not None
    assert settlement.reward == Decimal("0.50")
    assert settlement.referrer_credited
    await test_db.refresh(referrer)
    await test_db.refresh(referral)
    assert referrer.balance_referral == Decimal("0.50")
    assert referral.status == ReferralStatus.PAID.value
    assert referral.reward == Decimal("0.50")
    assert referral.settled_at is not None


async def test_settles_with_country_setting(test_db, store, pair):
    referrer, referred, _ = pair
    await seed_setting(test_db, "BRA", "1.25")

    await ReferralSettlement(store, DEFAULT_REWARD).on_task_completed(UserId(referred.id))

    await test_db.refresh(referrer)
    assert referrer.balance_referral == Decimal("1.25")


async def test_setting_of_referrer_country_is_not_used(test_db, store, pair):
    referrer, referred, _ = pair
    await seed_setting(test_db, "USA", "9.99")

    await ReferralSettlement(store, DEFAULT_REWARD).on_task_completed(UserId(referred.id))

    await test_db.refresh(referrer)
    assert referrer.balance_referral == Decimal("0.50")


async def test_second_completion_pays_nothing(test_db, store, pair):
    referrer, referred, _ = pair
    service = ReferralSettlement(store, DEFAULT_REWARD)

    await service.on_task_completed(UserId(referred.id))
    again = await service.on_task_completed(UserId(referred.id))

    assert again is None
    await test_db.refresh(referrer)
    assert referrer.balance_referral == Decimal("0.50")


async def test_user_without_referral_is_noop(test_db, store):
    loner = await seed_user(test_db, "loner")
    assert await ReferralSettlement(store, DEFAULT_REWARD).on_task_completed(
        UserId(loner.id),
    ) is None


async def test_blocked_referral_is_never_paid(test_db, store, pair):
    referrer, referred, referral = pair
    service = ReferralSettlement(store, DEFAULT_REWARD)

    blocked = await service.block_referral(ReferralId(referral.id))
    assert blocked.status == ReferralStatus.BLOCKED.value

    assert await service.on_task_completed(UserId(referred.id)) is None
    await test_db.refresh(referrer)
    assert referrer.balance_referral == Decimal("0.00")


async def test_block_paid_referral_is_rejected(test_db, store, pair):
    _, referred, referral = pair
    service = ReferralSettlement(store, DEFAULT_REWARD)
    await service.on_task_completed(UserId(referred.id))

    with pytest.raises(InvalidStateTransitionError):
        await service.block_referral(ReferralId(referral.id))


async def test_block_unknown_referral_is_not_found(store):
    with pytest.raises(ResourceNotFoundError):
        await ReferralSettlement(store, DEFAULT_REWARD).block_referral(ReferralId(404))


async def test_missing_referrer_still_marks_paid(test_db, store):
    referred = await seed_user(test_db, "orphan")
    missing_referrer = SimpleNamespace(id=9999)
    referral = await seed_referral(test_db, missing_referrer, referred)

    settlement = await ReferralSettlement(store, DEFAULT_REWARD).on_task_completed(
        UserId(referred.id),
    )

    assert settlement is not None
    assert not settlement.referrer_credited
    await test_db.refresh(referral)
    assert referral.status == ReferralStatus.PAID.value


async def test_concurrent_settlements_pay_once(file_session_factory):
    async with file_session_factory() as session:
        referrer = await seed_user(session, "ref")
        referred = await seed_user(session, "newbie", referred_by=referrer.id)
        referral = await seed_referral(session, referrer, referred)

    async def settle():
        async with file_session_factory() as session:
            return await ReferralSettlement(
                SqlLedgerStore(session), DEFAULT_REWARD,
            ).on_task_completed(UserId(referred.id))

    results = await asyncio.gather(*(settle() for _ in range(4)))

    assert sum(1 for r in results if r is not None) == 1
    stored_referrer = await fetch(file_session_factory, User, referrer.id)
    stored_referral = await fetch(file_session_factory, Referral, referral.id)
    assert stored_referrer.balance_referral == Decimal("0.50")
    assert stored_referral.status == ReferralStatus.PAID.value
