"""Ledger Settings — environment-driven configuration via pydantic-settings.

Invariants:
    - One Settings instance per process (get_settings is lru_cached)
    - Every field has a default: a bare checkout runs against a local SQLite file
    - Concurrency knobs are validated at startup, not at first use

Design Decisions:
    - Env vars and .env only; no config files to ship alongside the service
"""

from datetime import timezone, tzinfo
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from temple_ledger.core.domain_types import VisitDatePolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # ─── Storage ─────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./temple_ledger.db"
    database_pool_size: int = Field(default=20, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)

    # ─── Concurrency ─────────────────────────────────────────────
    lock_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Longest wait for a row lock before TIMEOUT",
    )
    max_transaction_retries: int = Field(
        default=2, ge=0, description="Extra attempts for a retryable book-and-pay failure",
    )
    retry_base_delay_ms: int = Field(
        default=50, ge=0, description="First backoff delay; doubles per attempt",
    )

    # ─── Booking rules ───────────────────────────────────────────
    visit_date_policy: VisitDatePolicy = VisitDatePolicy.ANY
    booking_timezone: str = Field(
        default="UTC", description="IANA zone whose calendar day is the booking date",
    )

    # ─── HTTP / logging ──────────────────────────────────────────
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, v):
        """Plain postgres:// URLs are rewritten to the asyncpg driver."""
        if isinstance(v, str):
            for prefix in ("postgresql://", "postgres://"):
                if v.startswith(prefix):
                    return "postgresql+asyncpg://" + v[len(prefix):]
        return v

    @field_validator("booking_timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        if v.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone {v!r}")
        return v

    @property
    def booking_tzinfo(self) -> tzinfo:
        return timezone.utc if self.booking_timezone == "UTC" else ZoneInfo(self.booking_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
