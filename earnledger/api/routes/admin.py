"""Admin — back-office operations over users, tasks, withdrawals and settings.

Invariants:
    - Every route depends on require_admin (non-admin -> 403, no identity -> 401)
    - Withdrawal decisions go through WithdrawalGuard (exactly-once, refund on reject)
    - Referral blocking goes through ReferralSettlement (pending only)
    - Plain CRUD writes commit inside store.transaction()
"""

import logging

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from earnledger.api.dependencies import (
    get_referral_settlement, get_store, get_withdrawal_guard, require_admin,
)
from earnledger.core.domain_types import (
    MAX_ROW_ID, Identity, ReferralId, WithdrawalId, to_money,
)
from earnledger.core.errors import ForbiddenError, ResourceNotFoundError
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from earnledger.schemas.referral import (
    ReferralResponse, ReferralSettingResponse, ReferralSettingUpsert,
)
from earnledger.schemas.task import TaskCreate, TaskResponse
from earnledger.schemas.user import UserResponse, UserUpdate
from earnledger.schemas.withdrawal import (
    AdminWithdrawalResponse, WithdrawalDecision, WithdrawalResponse,
)
from earnledger.services.referral_settlement import ReferralSettlement
from earnledger.services.withdrawal_guard import WithdrawalGuard

logger = logging.getLogger(__name__)
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]

router = APIRouter(
    prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)],
)


# ─── Users ───────────────────────────────────────────────────────


@router.get("/users", response_model=list[UserResponse])
async def list_users(store: SqlLedgerStore = Depends(get_store)):
    users = await store.list_users()
    return [UserResponse.model_validate(u) for u in users]


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: RowId,
    body: UserUpdate,
    admin: Identity = Depends(require_admin),
    store: SqlLedgerStore = Depends(get_store),
):
    """Activate/deactivate an account or change its role."""
    if user_id == admin.user_id and body.is_active is False:
        raise ForbiddenError("Admins cannot deactivate their own account")
    fields = body.model_dump(exclude_none=True)
    if "role" in fields:
        fields["role"] = fields["role"].value
    async with store.transaction():
        found = await store.update_user(user_id, **fields)
        if not found:
            raise ResourceNotFoundError("User", str(user_id))
    user = await store.get_user(user_id)
    logger.info("User updated", extra={"user_id": user_id})
    return UserResponse.model_validate(user)


# ─── Tasks ───────────────────────────────────────────────────────


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(store: SqlLedgerStore = Depends(get_store)):
    tasks = await store.list_tasks()
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post(
    "/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(
    body: TaskCreate, store: SqlLedgerStore = Depends(get_store),
):
    async with store.transaction():
        task = await store.add_task(
            country=body.country,
            smart_link=body.smart_link,
            tag_name=body.tag_name,
            reward_amount=to_money(body.reward_amount),
            is_active=body.is_active,
        )
    logger.info("Task created", extra={"task_id": task.id})
    return TaskResponse.model_validate(task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: RowId, store: SqlLedgerStore = Depends(get_store)):
    """Remove a task. Past completions keep their recorded reward."""
    async with store.transaction():
        deleted = await store.delete_task(task_id)
        if not deleted:
            raise ResourceNotFoundError("Task", str(task_id))
    logger.info("Task deleted", extra={"task_id": task_id})


# ─── Withdrawals ─────────────────────────────────────────────────


@router.get("/withdrawals", response_model=list[AdminWithdrawalResponse])
async def list_withdrawals(store: SqlLedgerStore = Depends(get_store)):
    rows = await store.list_all_withdrawals()
    return [
        AdminWithdrawalResponse(
            **WithdrawalResponse.model_validate(w).model_dump(),
            username=username,
            country=country,
        )
        for w, username, country in rows
    ]


@router.patch("/withdrawals/{withdrawal_id}", response_model=WithdrawalResponse)
async def decide_withdrawal(
    withdrawal_id: RowId,
    body: WithdrawalDecision,
    guard: WithdrawalGuard = Depends(get_withdrawal_guard),
):
    withdrawal = await guard.decide_withdrawal(
        WithdrawalId(withdrawal_id), body.status,
    )
    return WithdrawalResponse.model_validate(withdrawal)


# ─── Referrals ───────────────────────────────────────────────────


@router.get("/referral-settings", response_model=list[ReferralSettingResponse])
async def list_referral_settings(store: SqlLedgerStore = Depends(get_store)):
    settings = await store.list_referral_settings()
    return [ReferralSettingResponse.model_validate(s) for s in settings]


@router.post("/referral-settings", response_model=ReferralSettingResponse)
async def upsert_referral_setting(
    body: ReferralSettingUpsert, store: SqlLedgerStore = Depends(get_store),
):
    """Create or replace the referral reward and minimum withdrawal for a country."""
    async with store.transaction():
        setting = await store.upsert_referral_setting(
            body.country,
            to_money(body.reward_amount),
            to_money(body.min_withdrawal),
        )
    logger.info(
        f"Referral setting saved for {body.country}",
        extra={"reward": setting.reward_amount},
    )
    return ReferralSettingResponse.model_validate(setting)


@router.post("/referrals/{referral_id}/block", response_model=ReferralResponse)
async def block_referral(
    referral_id: RowId,
    settlement: ReferralSettlement = Depends(get_referral_settlement),
):
    referral = await settlement.block_referral(ReferralId(referral_id))
    return ReferralResponse.model_validate(referral)


# ─── Announcements ───────────────────────────────────────────────


@router.get("/announcements", response_model=list[AnnouncementResponse])
async def list_announcements(store: SqlLedgerStore = Depends(get_store)):
    items = await store.list_announcements()
    return [AnnouncementResponse.model_validate(a) for a in items]


@router.post(
    "/announcements", response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    body: AnnouncementCreate, store: SqlLedgerStore = Depends(get_store),
):
    async with store.transaction():
        announcement = await store.add_announcement(
            body.content, body.country, body.is_active,
        )
    return AnnouncementResponse.model_validate(announcement)


@router.delete(
    "/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_announcement(
    announcement_id: RowId, store: SqlLedgerStore = Depends(get_store),
):
    async with store.transaction():
        deleted = await store.delete_announcement(announcement_id)
        if not deleted:
            raise ResourceNotFoundError("Announcement", str(announcement_id))
