"""Service test fixtures — async DB, FastAPI test client, seed factories.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for readiness checks that bypass get_db
    - file_session_factory gives each concurrent caller its own connection

Design Decisions:
    - SQLite in-memory for single-session tests: fast, no external dependency
    - Concurrency tests use a file database: in-memory SQLite shares one
      connection, which would serialize the callers and hide races
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from earnledger.db.base import Base
from earnledger.db.session import create_session_factory
from earnledger.infrastructure.database import get_db, DatabaseSessionManager
from earnledger.infrastructure.ledger_store import SqlLedgerStore
import earnledger.infrastructure.database as db_module
from earnledger.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def store(test_db):
    return SqlLedgerStore(test_db)


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a SQLite file, one connection per session."""
    engine, factory = create_session_factory(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield factory
    await engine.dispose()


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
