"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Time and audit output reach services only through these Protocols
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Clock is injected so booking timestamps are deterministic in tests
"""

from datetime import datetime
from typing import Protocol

from temple_ledger.core.domain_events import DomainEvent


class Clock(Protocol):
    """Source of server-assigned timestamps (timezone-aware UTC)."""
    def now(self) -> datetime: ...


class AuditSink(Protocol):
    """Consumer of committed domain events — implemented by shell."""
    def publish(self, event: DomainEvent) -> None: ...
