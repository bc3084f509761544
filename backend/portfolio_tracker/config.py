"""Configuration for the portfolio tracker."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./portfolio.db"


class TrackerSettings(BaseSettings):
    """Runtime configuration, read from ``PORTFOLIO_*`` environment variables."""

    app_name: str = Field(default="Portfolio Tracker")
    api_prefix: str = Field(default="/portfolio")
    log_level: str = Field(default="INFO")

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="SQLAlchemy async database URL.",
    )
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    discount_rate: float = Field(
        default=0.06,
        gt=0.0,
        description="Required dividend yield used to derive the fair price.",
    )
    cost_basis_epsilon: float = Field(
        default=0.01,
        ge=0.0,
        description="Invested capital at or below this amount yields zero average price and yield.",
    )
    excellent_margin_threshold: float = Field(default=20.0)

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="portfolio-tracker")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_prefix="PORTFOLIO_", env_file=".env", env_file_encoding="utf-8")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitised representation safe for structured logging."""

        data = self.model_dump()
        url = data.get("database_url") or ""
        if "@" in url:
            scheme, _, rest = url.partition("://")
            data["database_url"] = f"{scheme}://***@{rest.split('@', 1)[1]}"
        return data


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> TrackerSettings:
    """Return cached settings, optionally overriding values for tests."""

    if overrides:
        return TrackerSettings(**overrides)
    return TrackerSettings()


__all__ = ["TrackerSettings", "get_settings", "DEFAULT_DATABASE_URL"]
