"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Money fields are Decimal and serialize as strings
    - Responses never carry password hashes

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
