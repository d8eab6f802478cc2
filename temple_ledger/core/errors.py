"""Error Hierarchy — typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error names the entity kind + id it concerns when one exists
    - Domain errors (4xx) leave the ledger unchanged; infrastructure errors are 5xx
    - retryable is True only for failures that a fresh transaction may not repeat
    - Messages name entities and ids only; driver text never reaches them

Design Decisions:
    - Single hierarchy with LedgerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """How loudly a failure is logged and reported."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Coarse failure class carried in every error envelope."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    INTEGRITY = "integrity"
    CONFLICT = "conflict"
    DATABASE = "database"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Which row an error concerns, and when a retry makes sense."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity: str | None = None
    entity_id: Any = None
    retry_after_ms: int | None = None
    debug_info: dict[str, Any] | None = None


def _with_entity(
    context: ErrorContext | None, entity: str, entity_id: Any,
) -> ErrorContext:
    ctx = context or ErrorContext()
    ctx.entity = entity
    ctx.entity_id = entity_id
    return ctx


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.retryable = retryable

    def to_response(self) -> dict:
        """The JSON body the API returns for this error."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "retryable": self.retryable,
                "context": {
                    "entity": self.context.entity,
                    "entity_id": self.context.entity_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (4xx) ─────────────────────────────────────────

class NotFoundError(LedgerError):
    """Lookup miss."""
    def __init__(
        self, entity: str, entity_id: Any, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{entity} '{entity_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, _with_entity(context, entity, entity_id), 404,
        )
        self.entity = entity
        self.entity_id = entity_id


class ReferentialIntegrityError(LedgerError):
    """Write referenced a parent row that does not exist."""
    def __init__(
        self, entity: str, entity_id: Any, referenced_by: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{referenced_by} references missing {entity} '{entity_id}'",
            "REFERENTIAL_INTEGRITY", ErrorCategory.INTEGRITY,
            ErrorSeverity.ERROR, _with_entity(context, entity, entity_id), 422,
        )
        self.entity = entity
        self.entity_id = entity_id
        self.referenced_by = referenced_by


class DuplicateKeyError(LedgerError):
    """Uniqueness violation (user email, or ticket already has a payment).

    The conflicting value stays on the exception; it reaches the message only when
    the key is an id, so an email never ends up in a client response.
    """
    def __init__(
        self, entity: str, key: str, value: Any,
        context: ErrorContext | None = None,
    ):
        shown = f"{key}={value!r}" if key.endswith("_id") else f"this {key}"
        ctx = context or ErrorContext()
        ctx.entity = entity
        super().__init__(
            f"{entity} with {shown} already exists",
            "DUPLICATE_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.entity = entity
        self.key = key
        self.value = value


class InvalidArgumentError(LedgerError):
    """Malformed input (amount, mode, date, name...)."""
    def __init__(
        self, message: str, field: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidStateTransitionError(LedgerError):
    """Illegal payment status change."""
    def __init__(
        self, payment_id: Any, current: str, requested: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Payment '{payment_id}' cannot move from {current} to {requested}",
            "INVALID_STATE_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, _with_entity(context, "Payment", payment_id), 409,
        )
        self.current = current
        self.requested = requested


# ─── Infrastructure Errors (5xx) ─────────────────────────────────

class LockTimeoutError(LedgerError):
    """Bounded wait for a row lock expired. State is unchanged."""
    def __init__(
        self, entity: str, entity_id: Any, timeout_seconds: float,
        context: ErrorContext | None = None,
    ):
        ctx = _with_entity(context, entity, entity_id)
        ctx.retry_after_ms = int(timeout_seconds * 1000)
        super().__init__(
            f"Timed out after {timeout_seconds}s waiting for lock on {entity} '{entity_id}'",
            "TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.WARNING, ctx, 503, retryable=True,
        )
        self.timeout_seconds = timeout_seconds


class TransactionAbortedError(LedgerError):
    """Multi-step write rolled back because of a non-ledger failure."""
    def __init__(
        self, operation: str, cause: BaseException,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Transaction '{operation}' rolled back: {type(cause).__name__}",
            "TRANSACTION_ABORTED", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context, 500,
        )
        self.operation = operation
        self.cause = cause


class DatabaseError(LedgerError):
    """Storage failure, already mapped by infrastructure/database.storage_error."""
    def __init__(
        self, message: str, operation: str, transient: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503, retryable=transient,
        )
        self.operation = operation
