"""Structured Logging — one JSON object per record, ledger ids as top-level keys.

Invariants:
    - Every record carries timestamp, level, logger and message
    - Ledger ids and audit fields (LEDGER_FIELDS) become top-level keys when set
    - setup_logging is idempotent: calling it twice does not duplicate output

Design Decisions:
    - Hand-written formatter over a logging library: the record shape is small and
      the audit sink writes through the same stream
    - SQLAlchemy engine logging pinned to WARNING unless the root level is DEBUG
"""

import json
import logging
from datetime import datetime, timezone

LEDGER_FIELDS = (
    "user_id", "temple_id", "ticket_id", "payment_id",
    "event_type", "event", "error_code", "attempt", "path",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "temple_ledger"


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single-line JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        doc = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        doc.update(
            (name, record.__dict__[name])
            for name in LEDGER_FIELDS
            if record.__dict__.get(name) is not None
        )
        if record.exc_info:
            doc["exception"] = self.formatException(record.exc_info)
        # Decimals and datetimes in audit payloads fall back to str()
        return json.dumps(doc, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    root_level = logging.getLevelName(level.upper())
    if not isinstance(root_level, int):
        root_level = logging.INFO
    root.setLevel(root_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if root_level <= logging.DEBUG else logging.WARNING,
    )
