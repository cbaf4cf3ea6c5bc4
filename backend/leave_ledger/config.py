from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings. Values may also come from a local ``.env`` file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Service
    app_name: str = "Leave Ledger"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Storage
    database_url: str = "postgresql+asyncpg://leave_ledger:leave_ledger@db:5432/leave_ledger"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)

    # Accrual policy: the senior rate applies once tenure reaches the carry-forward threshold.
    junior_monthly_rate: Decimal = Field(default=Decimal("1.5"), ge=0)
    senior_monthly_rate: Decimal = Field(default=Decimal("2.0"), ge=0)
    carry_forward_min_tenure_months: int = Field(default=12, ge=0)
    carry_forward_cap_days: Decimal | None = Field(default=None, ge=0)
    accrual_interval_seconds: int = Field(default=86400, ge=1)

    # Sandwich policy
    sandwich_sudden_leave_penalty: bool = False

    # Retries of a unit of work after a balance version conflict
    concurrency_max_retries: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def _check_rates(self) -> "Settings":
        if self.senior_monthly_rate < self.junior_monthly_rate:
            raise ValueError("senior_monthly_rate must not be lower than junior_monthly_rate")
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
