"""Payment Status Enforcement — the payment state machine as pure functions.

Invariants:
    - Pending is the only initial state; Success and Failed are terminal
    - LEGAL_TRANSITIONS is the single source of truth for allowed moves
    - Same-state "transitions" are illegal (a terminal status can never be re-set)
    - Pure: callers check before mutating, never after

Design Decisions:
    - Transition table over if/elif chain: one place to read every legal move
"""

from temple_ledger.core.domain_types import PaymentId, PaymentStatus
from temple_ledger.core.errors import (
    InvalidArgumentError, InvalidStateTransitionError,
)


INITIAL_STATUS: PaymentStatus = PaymentStatus.PENDING

LEGAL_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.SUCCESS, PaymentStatus.FAILED}),
    PaymentStatus.SUCCESS: frozenset(),
    PaymentStatus.FAILED: frozenset(),
}


def is_terminal(status: PaymentStatus) -> bool:
    return not LEGAL_TRANSITIONS[status]


def parse_status(value: "PaymentStatus | str") -> PaymentStatus:
    """Coerce a caller-supplied status. Accepts enum members or their values."""
    if isinstance(value, PaymentStatus):
        return value
    try:
        return PaymentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise InvalidArgumentError(
            f"Unknown payment status {value!r} (expected one of: {allowed})",
            "status",
        )


def check_transition(
    payment_id: PaymentId, current: PaymentStatus, requested: PaymentStatus,
) -> None:
    """Raise InvalidStateTransitionError unless current -> requested is legal."""
    if requested not in LEGAL_TRANSITIONS[current]:
        raise InvalidStateTransitionError(
            payment_id, current.value, requested.value,
        )
