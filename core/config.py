"""
Application configuration using Pydantic Settings.

Typed settings for the rule store connection, logging and the tax
constants that are not year-scoped (those live in the admin fee table).
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Rule store / study case database settings."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full database URL (takes precedence over individual params)",
    )
    name: str = Field(default="miaff_db", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: SecretStr = Field(default=SecretStr(""), description="Database password")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port", ge=1, le=65535)
    schema_name: str = Field(
        default="miaff",
        alias="DB_SCHEMA",
        description="PostgreSQL schema holding the rule store",
    )

    @property
    def connection_url(self) -> str:
        """Return DATABASE_URL if set, otherwise build it from the parts."""
        if self.url:
            return self.url
        return (
            f"postgresql://{self.user}:{self.password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.name}"
        )

    @property
    def safe_url(self) -> str:
        """Get database URL without password for logging."""
        if self.url:
            parsed = urlparse(self.url)
            if parsed.password:
                return self.url.replace(f":{parsed.password}@", ":***@")
            return self.url
        return f"postgresql://{self.user}@{self.host}:{self.port}/{self.name}"


class LoggingSettings(BaseSettings):
    """Structured logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )
    json_format: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v


class TaxSettings(BaseSettings):
    """
    Tax constants that are not stored per year.

    ``igv_rate`` and ``ipm_rate`` are fallbacks used when the rule store has
    no VAT-family rate rows. ``reporting_exchange_rate`` is the fixed PEN per
    USD rate used only to normalize profitability reports; simulations use
    the spot rate supplied with each operation.
    """

    model_config = SettingsConfigDict(env_prefix="TAX_")

    igv_rate: Decimal = Field(default=Decimal("0.16"), ge=0, le=1)
    ipm_rate: Decimal = Field(default=Decimal("0.02"), ge=0, le=1)
    reporting_currency: Literal["USD", "PEN"] = Field(default="USD")
    reporting_exchange_rate: Decimal = Field(
        default=Decimal("3.75"),
        gt=0,
        description="PEN per USD used for profitability normalization",
    )
    comparison_limit: int = Field(default=10, ge=1, le=100)


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    secret_key: SecretStr = Field(
        default=SecretStr("django-insecure-change-me-in-production"),
        description="Django secret key",
    )
    allowed_hosts: list[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1"],
        description="Allowed hosts",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    tax: TaxSettings = Field(default_factory=TaxSettings)

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: str | list[str]) -> list[str]:
        """Parse allowed hosts from comma-separated string or list."""
        if isinstance(v, str):
            return [h.strip() for h in v.split(",") if h.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Configured Settings instance.
    """
    return Settings()
