"""Auth — registration and current-account lookup.

Invariants:
    - POST /api/auth/register needs no identity; returns 201 with the new account
    - GET /api/auth/me returns the account behind the request identity
    - Login/logout/session cookies belong to the upstream authenticator
"""

from fastapi import APIRouter, Depends, status

from earnledger.api.dependencies import get_identity, get_registration, get_store
from earnledger.core.domain_types import Identity
from earnledger.core.errors import ResourceNotFoundError
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.user import RegisterRequest, UserResponse
from earnledger.services.registration import RegistrationService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register", response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    registration: RegistrationService = Depends(get_registration),
):
    """Create an account, attributing it to a referrer when the code is valid."""
    user = await registration.register_user(
        username=body.username,
        email=body.email,
        password=body.password,
        country=body.country,
        phone=body.phone,
        referral_code=body.referral_code,
    )
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def me(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    user = await store.get_user(identity.user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(identity.user_id))
    return UserResponse.model_validate(user)
