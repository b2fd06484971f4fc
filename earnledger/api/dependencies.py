"""Request Dependencies — per-request store, identity and service wiring.

Invariants:
    - One AsyncSession and one SqlLedgerStore per request (FastAPI dependency cache)
    - Identity is resolved from the trusted upstream header and re-read from the store:
      missing/unknown id -> 401, deactivated account -> 403
    - Admin routes depend on require_admin, never on a role check inside the handler

Design Decisions:
    - No global session object: Identity is a value passed into services explicitly
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from earnledger.config import get_settings
from earnledger.core.domain_types import Identity, Role, UserId, parse_row_id
from earnledger.core.errors import ForbiddenError, UnauthorizedError
from earnledger.infrastructure.database import get_db
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.services.callback_gateway import CallbackGateway
from earnledger.services.completion_recorder import CompletionRecorder
from earnledger.services.referral_settlement import ReferralSettlement
from earnledger.services.registration import RegistrationService
from earnledger.services.withdrawal_guard import WithdrawalGuard


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlLedgerStore:
    return SqlLedgerStore(db)


async def get_identity(
    request: Request, store: SqlLedgerStore = Depends(get_store),
) -> Identity:
    raw = request.headers.get(get_settings().identity_header, "").strip()
    try:
        user_id = parse_row_id(raw)
    except ValueError:
        raise UnauthorizedError()
    user = await store.get_user(user_id)
    if user is None:
        raise UnauthorizedError()
    if not user.is_active:
        raise ForbiddenError("Account is disabled")
    return Identity(user_id=UserId(user.id), country=user.country, role=Role(user.role))


async def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError()
    return identity


def get_referral_settlement(
    store: SqlLedgerStore = Depends(get_store),
) -> ReferralSettlement:
    return ReferralSettlement(store, get_settings().default_referral_reward)


def get_callback_gateway(
    store: SqlLedgerStore = Depends(get_store),
    settlement: ReferralSettlement = Depends(get_referral_settlement),
) -> CallbackGateway:
    return CallbackGateway(
        store, CompletionRecorder(store), settlement,
        get_settings().default_task_payout,
    )


def get_withdrawal_guard(
    store: SqlLedgerStore = Depends(get_store),
) -> WithdrawalGuard:
    return WithdrawalGuard(store, get_settings().default_min_withdrawal)


def get_registration(
    store: SqlLedgerStore = Depends(get_store),
) -> RegistrationService:
    return RegistrationService(store)
