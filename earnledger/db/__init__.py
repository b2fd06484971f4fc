"""Database Package — declarative Base and standalone session factory.

Invariants:
    - Base is imported by every ORM model and by alembic/env.py
"""
