"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, db/ or models/
    - All functions are pure and deterministic (time arrives through the Clock protocol)

Design Decisions:
    - Functional core separated from imperative shell: validation and the payment
      state machine are testable without a database
"""
