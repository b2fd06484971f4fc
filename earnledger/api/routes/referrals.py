"""Referrals — the caller's referred users and earnings summary."""

from fastapi import APIRouter, Depends

from earnledger.api.dependencies import get_identity, get_store
from earnledger.core.domain_types import Identity, ReferralStatus
from earnledger.core.errors import ResourceNotFoundError
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.referral import ReferralResponse, ReferralStats

router = APIRouter(prefix="/api/referrals", tags=["referrals"])


@router.get("", response_model=list[ReferralResponse])
async def list_referrals(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    referrals = await store.list_referrals_by_referrer(identity.user_id)
    return [ReferralResponse.model_validate(r) for r in referrals]


@router.get("/stats", response_model=ReferralStats)
async def referral_stats(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    user = await store.get_user(identity.user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(identity.user_id))
    referrals = await store.list_referrals_by_referrer(identity.user_id)
    return ReferralStats(
        total_referrals=len(referrals),
        paid_referrals=sum(
            1 for r in referrals if r.status == ReferralStatus.PAID.value
        ),
        pending_referrals=sum(
            1 for r in referrals if r.status == ReferralStatus.PENDING.value
        ),
        total_earnings=user.balance_referral,
    )
