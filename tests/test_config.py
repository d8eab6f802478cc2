"""Settings — defaults, env overrides and URL normalization."""

from datetime import timezone

import pytest
from pydantic import ValidationError

from temple_ledger.config import Settings
from temple_ledger.core.domain_types import VisitDatePolicy


def test_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LOCK_TIMEOUT_SECONDS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url.startswith("sqlite+aiosqlite://")
    assert settings.lock_timeout_seconds == 5.0
    assert settings.max_transaction_retries == 2
    assert settings.visit_date_policy is VisitDatePolicy.ANY


@pytest.mark.parametrize("url", [
    "postgresql://u:p@db:5432/ledger",
    "postgres://u:p@db:5432/ledger",
])
def test_postgres_urls_use_asyncpg(url):
    settings = Settings(_env_file=None, database_url=url)
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/ledger"


def test_visit_date_policy_from_env(monkeypatch):
    monkeypatch.setenv("VISIT_DATE_POLICY", "not_before_booking")
    assert Settings(_env_file=None).visit_date_policy is VisitDatePolicy.NOT_BEFORE_BOOKING


def test_non_positive_lock_timeout_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, lock_timeout_seconds=0)


def test_booking_timezone_defaults_to_utc():
    settings = Settings(_env_file=None)
    assert settings.booking_timezone == "UTC"
    assert settings.booking_tzinfo is timezone.utc


def test_unknown_booking_timezone_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, booking_timezone="Mars/Olympus")
