"""Postback — plain-text callback endpoint for the advertiser network.

Invariants:
    - GET /api/postback/ogads answers text/plain
    - 200 "OK" / "OK - Already Completed" for every accepted postback
    - 400 with a short message when user_id/task_id are missing or non-numeric
    - No identity header: the network is unauthenticated by design of the integration
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from earnledger.api.dependencies import get_callback_gateway
from earnledger.core.errors import ValidationError
from earnledger.services.callback_gateway import CallbackGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/postback", tags=["postback"])


@router.get("/ogads", response_class=PlainTextResponse)
async def ogads_postback(
    user_id: str | None = Query(None),
    task_id: str | None = Query(None),
    transaction_id: str | None = Query(None),
    payout: str | None = Query(None),
    gateway: CallbackGateway = Depends(get_callback_gateway),
):
    """Record a completion reported by the network and settle referrals."""
    try:
        result = await gateway.handle(user_id, task_id, payout, transaction_id)
    except ValidationError as e:
        logger.warning(
            f"Rejected postback: {e.message}",
            extra={"error_code": e.code, "path": "/api/postback/ogads"},
        )
        return PlainTextResponse(e.message, status_code=status.HTTP_400_BAD_REQUEST)
    return PlainTextResponse(result.response_text)
