"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForecastSettings(BaseSettings):
    """Consumption window and urgency tier thresholds."""

    model_config = SettingsConfigDict(env_prefix="FORECAST_")

    window_days: int = Field(default=30, ge=1)

    # Urgency tiers (days of stock remaining, inclusive)
    critical_days: int = Field(default=3, ge=0)
    warning_days: int = Field(default=7, ge=0)

    @model_validator(mode="after")
    def check_tier_order(self) -> "ForecastSettings":
        if self.critical_days >= self.warning_days:
            raise ValueError("critical_days must be lower than warning_days")
        return self


class AlertSettings(BaseSettings):
    """Alert aggregation configuration."""

    model_config = SettingsConfigDict(env_prefix="ALERT_")

    expiry_horizon_days: int = Field(default=30, ge=0)
    default_validity_days: int = Field(default=180, ge=1)

    # Placeholder labels for lookup misses
    unknown_item_label: str = "Unknown item"
    unknown_subject_label: str = "Unknown subject"


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "carestock.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    # Retries for writes hitting a locked database
    write_retries: int = Field(default=3, ge=1)
    write_retry_delay: float = Field(default=0.05, gt=0)  # seconds

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "CareStock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
