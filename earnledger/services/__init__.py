"""Services Layer — settlement, withdrawal and registration workflows over the LedgerStore.

Invariants:
    - Each public service method is one or two atomic store transactions
    - Services take a LedgerStore, never an AsyncSession

Design Decisions:
    - One file per component for locality; wiring lives in api/dependencies.py
"""
