"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - JSON responses everywhere except the plain-text postback endpoint

Design Decisions:
    - Thin routes delegate to services; services delegate rules to core
"""
