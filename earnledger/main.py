"""EarnLedger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one include_router per module
    - Error handlers map EarnLedgerError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan; bootstrap admin created once
      when ADMIN_USERNAME and ADMIN_PASSWORD are both set

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The postback route answers plain text; every other route answers JSON
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from earnledger.api.error_handlers import register_error_handlers
from earnledger.api.routes import (
    admin, announcements, auth, health, postback, referrals, tasks, withdrawals,
)
from earnledger.config import Settings, get_settings
from earnledger.infrastructure.database import DatabaseSessionManager, init_db
from earnledger.infrastructure.ledger_store import SqlLedgerStore
from earnledger.infrastructure.observability import setup_logging
from earnledger.services.registration import RegistrationService

logger = logging.getLogger(__name__)


async def bootstrap_admin(manager: DatabaseSessionManager, settings: Settings) -> None:
    """Create the configured admin account if it does not exist yet."""
    if not (settings.admin_username and settings.admin_password):
        return
    async with manager.session() as db:
        admin = await RegistrationService(SqlLedgerStore(db)).ensure_admin(
            username=settings.admin_username,
            email=settings.admin_email,
            password=settings.admin_password,
            country=settings.admin_country,
        )
    logger.info("Admin account ready", extra={"user_id": admin.id})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await bootstrap_admin(manager, settings)
    logger.info("EarnLedger API started")
    yield
    await manager.dispose()
    logger.info("EarnLedger API shutting down")


app = FastAPI(title="EarnLedger API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(postback.router)
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(withdrawals.router)
app.include_router(referrals.router)
app.include_router(announcements.router)
app.include_router(admin.router)

register_error_handlers(app)
