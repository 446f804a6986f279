"""
Configuration Management for Spendlog

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, logging and export formatting are all read
from the environment (or a .env file) and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistent store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPENDLOG_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_path: str = Field(
        default="spendlog.db",
        description="Path to the SQLite database file"
    )
    in_memory: bool = Field(
        default=False,
        description="Keep records in memory only (nothing survives a restart)"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement issued by the storage engine"
    )

    @field_validator('database_path')
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        """Reject an empty path; existence is checked when the store opens."""
        if not v.strip():
            raise ValueError("database_path must not be empty")
        return v.strip()

    @property
    def database_file(self) -> Path:
        return Path(self.database_path).expanduser()


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
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured log output"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines (console rendering otherwise)"
    )

    # Defaults applied by the engine
    default_category: str = Field(
        default="Other",
        min_length=1,
        description="Category used when an expense is recorded without one"
    )
    default_theme: str = Field(
        default="light",
        description="Theme returned when no theme setting is stored"
    )

    # Export formatting
    csv_date_format: str = Field(
        default="%m/%d/%Y",
        description="strftime format for the Date column of CSV exports"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept level names the logging module knows."""
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
    def app(self) -> AppSettings:
        return AppSettings()


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
    extra "<name>_error" entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
