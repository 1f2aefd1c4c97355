"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds and limits used by validation and the budget evaluator live
here so there is exactly one place to change them.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".expense_tracker",
        description="Directory holding the local data file"
    )
    file_name: str = Field(
        default="store.json",
        min_length=1,
        description="Name of the JSON document inside data_dir"
    )
    # Browser localStorage gives roughly 5 MiB per origin
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=0,
        description="Maximum serialized store size in bytes (0 = unlimited)"
    )
    audit_max_events: int = Field(
        default=500,
        ge=1,
        le=100000,
        description="How many audit events to keep per user"
    )

    @property
    def store_path(self) -> Path:
        """Full path to the JSON store file."""
        return self.data_dir.expanduser() / self.file_name


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_name: str = Field(
        default="noura",
        min_length=1,
        description="Short application name, used in export file names"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level for local structured logs"
    )

    # Display
    currency_symbol: str = Field(
        default="K",
        description="Currency symbol shown in front of amounts"
    )

    # Account rules
    min_username_length: int = Field(
        default=3,
        ge=1,
        description="Minimum username length at signup"
    )
    min_password_length: int = Field(
        default=6,
        ge=1,
        description="Minimum password length at signup"
    )

    # Budget thresholds
    budget_warning_percent: Decimal = Field(
        default=Decimal("80"),
        gt=0,
        lt=100,
        description="Spend percentage at which the budget turns to WARNING"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, store upper case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
