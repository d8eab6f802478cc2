"""Audit Sink — publishes committed domain events to the structured log stream.

Invariants:
    - Receives only events whose transaction committed (UnitOfWork guarantees this)
    - A failure here is logged by UnitOfWork and never undoes the commit

Design Decisions:
    - Log stream as the audit collaborator: no side table written in the ledger's
      transaction, so audit output is decoupled from commit
"""

import logging

from temple_ledger.core.domain_events import DomainEvent, event_payload

logger = logging.getLogger("temple_ledger.audit")


class LoggingAuditSink:
    """AuditSink that writes one INFO record per event."""

    def __init__(self, audit_logger: logging.Logger | None = None):
        self._logger = audit_logger or logger

    def publish(self, event: DomainEvent) -> None:
        payload = event_payload(event)
        self._logger.info(
            event.event_type,
            extra={
                "event_type": event.event_type,
                "event": payload,
                "ticket_id": payload.get("ticket_id"),
                "payment_id": payload.get("payment_id"),
            },
        )
