"""Application configuration via environment variables.

Uses pydantic-settings to load from .env file and environment variables.
All config is centralized here — modules should import `get_settings()`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from veronica.common.exceptions import ConfigurationError

InsufficientHistoryPolicy = Literal["neutral", "raise"]
MissingPricePolicy = Literal["zero_fill", "fail"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─── Storage ───
    database_url: str = "sqlite:///veronica.db"

    # ─── App ───
    environment: str = "development"
    log_level: str = "INFO"

    # ─── FinMind API ───
    finmind_token: str = ""
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    finmind_rate_limit_per_second: float = Field(default=1.0, gt=0)
    rate_limit_backoff_seconds: float = Field(default=3600.0, ge=0)  # FinMind quota resets hourly
    rate_limit_max_retries: int = Field(default=24, ge=0)

    # ─── Simulation Defaults ───
    initial_liquidity: int = Field(default=200_000, ge=0)
    capacity: int = Field(default=5, ge=1)
    strategy: str = "bollinger_band"
    missing_price_policy: MissingPricePolicy = "zero_fill"

    # ─── Bollinger Band ───
    indicator_period: int = Field(default=20, ge=1)
    analyze_range: int = Field(default=10, ge=2)
    band_size: int = Field(default=2, ge=1)
    settle_streak: int = Field(default=3, ge=1)
    insufficient_history_policy: InsufficientHistoryPolicy = "neutral"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Uses lru_cache so Settings is only instantiated once.
    In tests, call `get_settings.cache_clear()` to reset.

    Raises:
        ConfigurationError: If any environment value fails validation.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(
            "Invalid settings",
            context={"errors": [err["loc"] for err in exc.errors()]},
        ) from exc
