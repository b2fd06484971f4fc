"""Withdrawals — a user's own withdrawal history and new requests.

Invariants:
    - POST debits the balance immediately and returns 201 with the pending withdrawal
    - Below-minimum -> 400 VALIDATION_ERROR, above-balance -> 400 INSUFFICIENT_BALANCE
"""

from fastapi import APIRouter, Depends, status

from earnledger.api.dependencies import get_identity, get_store, get_withdrawal_guard
from earnledger.core.domain_types import Identity
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.withdrawal import WithdrawalCreate, WithdrawalResponse
from earnledger.services.withdrawal_guard import WithdrawalGuard

router = APIRouter(prefix="/api/withdrawals", tags=["withdrawals"])


@router.get("", response_model=list[WithdrawalResponse])
async def list_withdrawals(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    withdrawals = await store.list_withdrawals(identity.user_id)
    return [WithdrawalResponse.model_validate(w) for w in withdrawals]


@router.post(
    "", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED,
)
async def create_withdrawal(
    body: WithdrawalCreate,
    identity: Identity = Depends(get_identity),
    guard: WithdrawalGuard = Depends(get_withdrawal_guard),
):
    withdrawal = await guard.request_withdrawal(
        identity, body.amount, body.wallet_address, body.network,
    )
    return WithdrawalResponse.model_validate(withdrawal)
