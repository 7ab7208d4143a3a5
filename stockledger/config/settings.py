"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InventorySettings(BaseSettings):
    """Inventory engine configuration (costing, pricing, matching)."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    costing_method: Literal["LIFO", "FIFO", "WEIGHTED_AVERAGE"] = "LIFO"
    suggested_margin: float = Field(default=0.4, ge=0)
    low_stock_alert: float = Field(default=5.0, ge=0)
    allow_negative_stock: bool = True

    # Reconciliation thresholds
    auto_match_threshold: float = 0.9
    ask_match_threshold: float = 0.75
    fallback_by_description: bool = True

    # Upper bound on pending decisions created by one import (None = unbounded)
    max_pending_per_import: int | None = None

    @model_validator(mode="after")
    def check_thresholds(self) -> "InventorySettings":
        """Reject incoherent match thresholds."""
        for name in ("auto_match_threshold", "ask_match_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.auto_match_threshold < self.ask_match_threshold:
            raise ValueError(
                "auto_match_threshold must be >= ask_match_threshold "
                f"({self.auto_match_threshold} < {self.ask_match_threshold})"
            )
        return self


class StorageSettings(BaseSettings):
    """Snapshot storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "json"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "stockledger.db"
    snapshot_name: str = "ledger_snapshot.json"

    # SQLite settings
    pool_size: int = 2
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / self.snapshot_name


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

    app_name: str = "Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    inventory: InventorySettings = Field(default_factory=InventorySettings)
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
