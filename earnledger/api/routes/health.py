"""Health Probes — liveness and database readiness for the settlement API.

Invariants:
    - GET /api/health/ answers 200 while the process runs
    - GET /api/health/ready answers 503 until the ledger database responds
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from earnledger.infrastructure import database

SERVICE_NAME = "earnledger-api"

router = APIRouter(prefix="/api/health", tags=["health"])


async def _ledger_reachable() -> bool:
    manager = database.db_manager
    return manager is not None and await manager.health_check()


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness():
    """Postbacks must not be routed here before the ledger is reachable."""
    if not await _ledger_reachable():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
