"""User Routes — identity, registration, tasks, withdrawals, referrals, announcements.

Invariants:
    - No or unknown X-User-Id -> 401; deactivated account -> 403
    - Register returns 201 and never exposes the password hash
    - Task list is country-scoped with a per-user completed flag
    - Withdrawal errors map to 400 with VALIDATION_ERROR / INSUFFICIENT_BALANCE
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from earnledger.models import CompletedTask, Referral, User
from tests.services.seed import (
    auth, fetch, seed_announcement, seed_referral, seed_task, seed_user,
)


# ─── Identity ────────────────────────────────────────────────────

async def test_me_without_identity_is_401(client):
    res = await client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"


async def test_me_with_unknown_user_is_401(client):
    res = await client.get("/api/auth/me", headers={"X-User-Id": "31337"})
    assert res.status_code == 401


async def test_me_with_non_numeric_header_is_401(client):
    res = await client.get("/api/auth/me", headers={"X-User-Id": "alice"})
    assert res.status_code == 401


@pytest.mark.parametrize("raw", ["²".encode("latin-1"), b"99999999999999999999999"])
async def test_non_ascii_or_oversized_header_is_401(client, raw):
    res = await client.get("/api/tasks", headers={"X-User-Id": raw})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"


async def test_deactivated_user_is_403(client, test_db):
    user = await seed_user(test_db, is_active=False)
    res = await client.get("/api/auth/me", headers=auth(user))
    assert res.status_code == 403


async def test_me_returns_account(client, test_db):
    user = await seed_user(test_db, balance_task="3.50")
    res = await client.get("/api/auth/me", headers=auth(user))
    assert res.status_code == 200
    body = res.json()
    assert body["username"] == "alice"
    assert Decimal(body["balance_task"]) == Decimal("3.50")
    assert "password_hash" not in body


# ─── Registration ────────────────────────────────────────────────

async def test_register_returns_201(client):
    res = await client.post("/api/auth/register", json={
        "username": "bob", "email": "bob@example.com", "password": "hunter22",
        "country": "BRA", "phone": "555-0101",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["username"] == "bob"
    assert body["referred_by"] is None
    assert "password" not in body
    assert "password_hash" not in body


async def test_register_with_referral_code(client, test_db, test_session_factory):
    referrer = await seed_user(test_db, "alice")
    res = await client.post("/api/auth/register", json={
        "username": "bob", "email": "bob@example.com", "password": "hunter22",
        "country": "BRA", "phone": "555-0101",
        "referral_code": referrer.referral_code,
    })
    assert res.status_code == 201
    assert res.json()["referred_by"] == referrer.id
    async with test_session_factory() as session:
        referral = (await session.execute(select(Referral))).scalar_one()
    assert referral.status == "pending"


async def test_register_duplicate_username_is_409(client, test_db):
    await seed_user(test_db, "bob")
    res = await client.post("/api/auth/register", json={
        "username": "bob", "email": "new@example.com", "password": "hunter22",
        "country": "BRA", "phone": "555-0101",
    })
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CONFLICT"


async def test_register_invalid_body_is_400(client):
    res = await client.post("/api/auth/register", json={"username": "bob"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Tasks ───────────────────────────────────────────────────────

async def test_tasks_scoped_to_country_with_completed_flag(client, test_db):
    user = await seed_user(test_db, country="BRA")
    done = await seed_task(test_db, country="BRA")
    todo = await seed_task(test_db, country="BRA")
    await seed_task(test_db, country="USA")
    await seed_task(test_db, country="BRA", is_active=False)
    test_db.add(CompletedTask(
        user_id=user.id, task_id=done.id, reward_earned=Decimal("0.75"),
    ))
    await test_db.commit()

    res = await client.get("/api/tasks", headers=auth(user))

    assert res.status_code == 200
    flags = {t["id"]: t["completed"] for t in res.json()}
    assert flags == {done.id: True, todo.id: False}


# ─── Withdrawals ─────────────────────────────────────────────────

async def test_create_withdrawal_201_and_listed(client, test_db, test_session_factory):
    user = await seed_user(test_db, balance_task="25.00")
    res = await client.post("/api/withdrawals", headers=auth(user), json={
        "amount": "20.00", "wallet_address": "TXabc", "network": "TRC20",
    })
    assert res.status_code == 201
    assert res.json()["status"] == "pending"

    listing = await client.get("/api/withdrawals", headers=auth(user))
    assert len(listing.json()) == 1
    stored = await fetch(test_session_factory, User, user.id)
    assert stored.balance_task == Decimal("5.00")


async def test_withdrawal_below_minimum_is_400(client, test_db):
    user = await seed_user(test_db, balance_task="25.00")
    res = await client.post("/api/withdrawals", headers=auth(user), json={
        "amount": "5.00", "wallet_address": "TXabc", "network": "TRC20",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_withdrawal_above_balance_is_400(client, test_db):
    user = await seed_user(test_db, balance_task="25.00")
    res = await client.post("/api/withdrawals", headers=auth(user), json={
        "amount": "30.00", "wallet_address": "TXabc", "network": "TRC20",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INSUFFICIENT_BALANCE"


async def test_withdrawal_unknown_network_is_400(client, test_db):
    user = await seed_user(test_db, balance_task="25.00")
    res = await client.post("/api/withdrawals", headers=auth(user), json={
        "amount": "20.00", "wallet_address": "TXabc", "network": "BEP20",
    })
    assert res.status_code == 400


# ─── Referrals ───────────────────────────────────────────────────

async def test_referral_list_and_stats(client, test_db):
    referrer = await seed_user(test_db, "ref", balance_referral="0.50")
    paid_user = await seed_user(test_db, "one", referred_by=referrer.id)
    pending_user = await seed_user(test_db, "two", referred_by=referrer.id)
    await seed_referral(test_db, referrer, paid_user, status="paid")
    await seed_referral(test_db, referrer, pending_user)

    listing = await client.get("/api/referrals", headers=auth(referrer))
    stats = await client.get("/api/referrals/stats", headers=auth(referrer))

    assert len(listing.json()) == 2
    body = stats.json()
    assert body["total_referrals"] == 2
    assert body["paid_referrals"] == 1
    assert body["pending_referrals"] == 1
    assert Decimal(body["total_earnings"]) == Decimal("0.50")


# ─── Announcements ───────────────────────────────────────────────

async def test_announcements_global_and_own_country(client, test_db):
    user = await seed_user(test_db, country="BRA")
    await seed_announcement(test_db, "Welcome")
    await seed_announcement(test_db, "Ola", country="BRA")
    await seed_announcement(test_db, "Howdy", country="USA")
    await seed_announcement(test_db, "Old news", is_active=False)

    res = await client.get("/api/announcements", headers=auth(user))

    assert sorted(a["content"] for a in res.json()) == ["Ola", "Welcome"]
