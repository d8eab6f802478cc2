"""Root conftest — environment for every test module.

Settings are read on first import of temple_ledger.main, so these must be set
before any test module imports the app.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_ledger.db")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOCK_TIMEOUT_SECONDS", "2.0")
