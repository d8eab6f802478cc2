"""Infrastructure Layer — storage, clocks, locks, logging and audit output.

Invariants:
    - Implements the Protocols declared in core/boundary_protocols.py
    - Storage failures surface as core/errors.DatabaseError, never raw SQLAlchemy errors

Design Decisions:
    - Concrete adapters live here so services depend on Protocols, not on these classes
"""
