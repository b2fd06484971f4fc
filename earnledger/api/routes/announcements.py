"""Announcements — active global and country-specific notices for the caller."""

from fastapi import APIRouter, Depends

from earnledger.api.dependencies import get_identity, get_store
from earnledger.core.domain_types import Identity
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.schemas.announcement import AnnouncementResponse

router = APIRouter(prefix="/api/announcements", tags=["announcements"])


@router.get("", response_model=list[AnnouncementResponse])
async def list_announcements(
    identity: Identity = Depends(get_identity),
    store: SqlLedgerStore = Depends(get_store),
):
    items = await store.list_announcements(identity.country)
    return [AnnouncementResponse.model_validate(a) for a in items]
