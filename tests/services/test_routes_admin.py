"""Admin Routes — role gate, task CRUD, withdrawal decisions, referral settings.

Invariants:
    - Non-admin identity -> 403 on every admin route
    - Rejecting a withdrawal refunds; deciding twice -> 409
    - Referral settings upsert per country
    - Blocking a paid referral -> 409
"""

from decimal import Decimal

from earnledger.models import User
from tests.services.seed import (
    auth, fetch, seed_referral, seed_task, seed_user, seed_withdrawal,
)


async def _admin(session) -> User:
    return await seed_user(session, "boss", role="admin")


async def test_non_admin_is_403(client, test_db):
    user = await seed_user(test_db)
    for path in ("/api/admin/users", "/api/admin/tasks", "/api/admin/withdrawals"):
        res = await client.get(path, headers=auth(user))
        assert res.status_code == 403


async def test_admin_without_identity_is_401(client):
    res = await client.get("/api/admin/users")
    assert res.status_code == 401


async def test_list_users(client, test_db):
    admin = await _admin(test_db)
    await seed_user(test_db, "alice")
    res = await client.get("/api/admin/users", headers=auth(admin))
    assert res.status_code == 200
    assert {u["username"] for u in res.json()} == {"boss", "alice"}


async def test_deactivate_user(client, test_db, test_session_factory):
    admin = await _admin(test_db)
    user = await seed_user(test_db, "alice")

    res = await client.patch(
        f"/api/admin/users/{user.id}", headers=auth(admin), json={"is_active": False},
    )

    assert res.status_code == 200
    assert res.json()["is_active"] is False
    stored = await fetch(test_session_factory, User, user.id)
    assert stored.is_active is False


async def test_admin_cannot_deactivate_self(client, test_db):
    admin = await _admin(test_db)
    res = await client.patch(
        f"/api/admin/users/{admin.id}", headers=auth(admin), json={"is_active": False},
    )
    assert res.status_code == 403


async def test_update_unknown_user_is_404(client, test_db):
    admin = await _admin(test_db)
    res = await client.patch(
        "/api/admin/users/999", headers=auth(admin), json={"role": "admin"},
    )
    assert res.status_code == 404


async def test_out_of_range_path_id_is_400(client, test_db):
    admin = await _admin(test_db)
    res = await client.delete(
        "/api/admin/tasks/99999999999999999999999", headers=auth(admin),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_task_create_list_delete(client, test_db):
    admin = await _admin(test_db)
    created = await client.post("/api/admin/tasks", headers=auth(admin), json={
        "country": "BRA", "smart_link": "https://offers.example.com/x",
        "tag_name": "Survey", "reward_amount": "1.10",
    })
    assert created.status_code == 201
    task_id = created.json()["id"]

    listing = await client.get("/api/admin/tasks", headers=auth(admin))
    assert [t["id"] for t in listing.json()] == [task_id]

    deleted = await client.delete(f"/api/admin/tasks/{task_id}", headers=auth(admin))
    assert deleted.status_code == 204
    missing = await client.delete(f"/api/admin/tasks/{task_id}", headers=auth(admin))
    assert missing.status_code == 404


async def test_task_reward_must_be_positive(client, test_db):
    admin = await _admin(test_db)
    res = await client.post("/api/admin/tasks", headers=auth(admin), json={
        "country": "BRA", "smart_link": "https://offers.example.com/x",
        "tag_name": "Survey", "reward_amount": "0",
    })
    assert res.status_code == 400


async def test_withdrawal_list_includes_requester(client, test_db):
    admin = await _admin(test_db)
    user = await seed_user(test_db, "alice", country="IND")
    await seed_withdrawal(test_db, user, "20.00", "20.00", "0.00")

    res = await client.get("/api/admin/withdrawals", headers=auth(admin))

    row = res.json()[0]
    assert row["username"] == "alice"
    assert row["country"] == "IND"


async def test_reject_withdrawal_refunds_then_second_decision_409(
    client, test_db, test_session_factory,
):
    admin = await _admin(test_db)
    user = await seed_user(test_db, "alice")
    withdrawal = await seed_withdrawal(test_db, user, "25.00", "20.00", "5.00")
    url = f"/api/admin/withdrawals/{withdrawal.id}"

    first = await client.patch(url, headers=auth(admin), json={"status": "rejected"})
    second = await client.patch(url, headers=auth(admin), json={"status": "approved"})

    assert first.status_code == 200
    assert first.json()["status"] == "rejected"
    assert second.status_code == 409
    stored = await fetch(test_session_factory, User, user.id)
    assert stored.balance_task == Decimal("20.00")
    assert stored.balance_referral == Decimal("5.00")


async def test_referral_setting_upsert(client, test_db):
    admin = await _admin(test_db)
    url = "/api/admin/referral-settings"

    await client.post(url, headers=auth(admin), json={
        "country": "BRA", "reward_amount": "1.25",
    })
    res = await client.post(url, headers=auth(admin), json={
        "country": "BRA", "reward_amount": "2.00", "min_withdrawal": "15.00",
    })

    assert res.status_code == 200
    listing = (await client.get(url, headers=auth(admin))).json()
    assert len(listing) == 1
    assert Decimal(listing[0]["reward_amount"]) == Decimal("2.00")
    assert Decimal(listing[0]["min_withdrawal"]) == Decimal("15.00")


async def test_block_referral(client, test_db):
    admin = await _admin(test_db)
    referrer = await seed_user(test_db, "ref")
    referred = await seed_user(test_db, "newbie", referred_by=referrer.id)
    pending = await seed_referral(test_db, referrer, referred)
    other = await seed_user(test_db, "other", referred_by=referrer.id)
    paid = await seed_referral(test_db, referrer, other, status="paid")

    ok = await client.post(
        f"/api/admin/referrals/{pending.id}/block", headers=auth(admin),
    )
    conflict = await client.post(
        f"/api/admin/referrals/{paid.id}/block", headers=auth(admin),
    )

    assert ok.status_code == 200
    assert ok.json()["status"] == "blocked"
    assert conflict.status_code == 409


async def test_announcement_create_and_delete(client, test_db):
    admin = await _admin(test_db)
    created = await client.post("/api/admin/announcements", headers=auth(admin), json={
        "content": "Maintenance tonight", "country": None,
    })
    assert created.status_code == 201

    announcement_id = created.json()["id"]
    deleted = await client.delete(
        f"/api/admin/announcements/{announcement_id}", headers=auth(admin),
    )
    assert deleted.status_code == 204
