"""Services Layer — the ledger components and their transaction scope.

Invariants:
    - Dependency order: identity_store -> booking_ledger -> payment_processor
      -> revenue_aggregator; booking_orchestrator composes the writers
    - Every write runs inside UnitOfWork.transaction()

Design Decisions:
    - One file per component for locality
"""
