"""Infrastructure — database session management, the ledger store, and logging setup.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All SQL lives here; services talk to LedgerStore only

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
