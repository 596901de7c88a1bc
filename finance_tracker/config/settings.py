"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: where data is stored, which
currency totals are shown in, how far ahead recurring transactions are
generated and how the password lock behaves.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(memory|file)$",
        description="Storage backend to use"
    )
    data_dir: str = Field(
        default=str(Path.home() / ".finance_tracker"),
        description="Directory holding one file per storage key (file backend)"
    )

    # Storage keys, matching the layout written by the mobile app
    transactions_key: str = Field(default="@transactions")
    categories_key: str = Field(default="@categories")
    accounts_key: str = Field(default="@accounts")
    password_key: str = Field(default="@app_password")
    default_currency_key: str = Field(default="@default_currency")


class TrackerSettings(BaseSettings):
    """
    Behavioural settings for the tracker core.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_currency_code: str = Field(
        default="EUR",
        description="Currency code used when no default currency is stored"
    )
    default_currency_symbol: str = Field(
        default="€",
        description="Display symbol matching default_currency_code"
    )
    recurrence_horizon_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="How many months ahead recurring transactions are generated"
    )
    min_password_length: int = Field(
        default=6,
        ge=1,
        description="Minimum length of the app lock password"
    )
    password_hash_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor for the stored password hash"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the structured logger"
    )

    @field_validator("default_currency_code")
    @classmethod
    def upper_currency_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    "<name>_error" entry describing each failure.
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
        _ = settings.tracker
        results["tracker"] = True
    except Exception as e:
        results["tracker"] = False
        results["tracker_error"] = str(e)

    return results
