"""Application configuration loaded from environment variables.

Fixed risk-model thresholds and weights are not configurable; they live in
``learnguard.shared.constants``. Everything here is operational tuning.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from the environment (or ``.env``)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # HTTP server (used by `learnguard serve`)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = Field(
        default="",
        description="Comma-separated allowed origins; empty means localhost in development",
    )

    # Path optimizer
    path_cache_ttl_hours: float = Field(
        default=24.0,
        gt=0,
        description="How long a generated learning path is served from cache",
    )

    # Alerts
    alert_history_limit: int = Field(
        default=100,
        ge=1,
        description="Alerts kept in history; the oldest are dropped beyond this",
    )
    strategy_cache_limit: int = Field(
        default=100,
        ge=1,
        description="Unreferenced strategies kept for lookup; those in alert history or open executions are always kept",
    )

    # Background jobs
    analysis_interval_minutes: int = Field(default=10, ge=1)
    alert_sweep_interval_minutes: int = Field(default=30, ge=1)

    # Analytics reports
    report_window_days: int = Field(
        default=30,
        ge=1,
        description="Length of the default report window ending now",
    )
    trend_stable_percent: float = Field(
        default=10.0,
        ge=0,
        description="Absolute percent change at or below which a trend is stable",
    )
    correlation_buckets: int = Field(
        default=4,
        ge=2,
        description="Sub-windows the report window is split into for correlations",
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Allowed CORS origins.

        Explicit CORS_ORIGINS always win. Without them, development allows the
        local dashboard ports and every other environment allows nothing.
        """
        if self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if not self.is_development:
            return []
        return [
            f"http://{host}:{port}"
            for host in ("localhost", "127.0.0.1")
            for port in (3000, self.api_port)
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
