"""
Configuration Management for Tripbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which constants drive money handling and OCR
parsing, and which external collaborators (rate endpoint, OCR engine)
the core talks to.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CurrencySettings(BaseSettings):
    """Base-currency and rounding configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPBOOK_CURRENCY_",
        extra="ignore"
    )

    base_currency: str = Field(
        default="EUR",
        description="Currency every monetary field is persisted in"
    )
    default_display_currency: str = Field(
        default="EUR",
        description="Currency amounts are shown in until the user switches"
    )
    settlement_epsilon: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Differences at or below this are considered settled"
    )

    @field_validator('base_currency', 'default_display_currency')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Currency codes are upper-case ISO codes."""
        return v.strip().upper()


class OcrSettings(BaseSettings):
    """Receipt amount extraction configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPBOOK_OCR_",
        extra="ignore"
    )

    default_currency: str = Field(
        default="EUR",
        description="Currency assumed for bare numbers (primary deployment market)"
    )
    max_amount: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Upper bound for amounts in currencies with cents"
    )
    max_amount_no_minor_unit: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Upper bound for amounts in currencies without a minor unit"
    )


class ExchangeRateSettings(BaseSettings):
    """Exchange-rate fetch configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPBOOK_RATES_",
        extra="ignore"
    )

    endpoint_url: str = Field(
        default="https://api.frankfurter.dev/v1/latest",
        description="Rate endpoint returning {'rates': {code: rate}}"
    )
    symbols: str = Field(
        default="KRW,USD,JPY,CNY",
        description="Comma-separated currencies to request"
    )
    stale_after_hours: int = Field(
        default=24,
        ge=1,
        description="Cached rates older than this are refreshed"
    )
    retry_after_minutes: int = Field(
        default=15,
        ge=0,
        description="After a failed refresh, fallback rates are served this long before trying again"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="HTTP timeout for a single fetch"
    )

    @property
    def symbols_list(self) -> list[str]:
        """Get requested symbols as a list."""
        return [s.strip().upper() for s in self.symbols.split(",") if s.strip()]


class MindeeSettings(BaseSettings):
    """Mindee OCR engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MINDEE_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Mindee API key"
    )


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

    # Defaults for trips imported from legacy snapshots
    default_trip_name: str = Field(
        default="Imported trip",
        description="Name given to imported trips that have none"
    )
    default_total_budget: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Budget given to imported trips that have none"
    )


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

    # Sub-settings are loaded lazily so a missing Mindee key does not
    # stop the pure parts of the core from working.

    @property
    def currency(self) -> CurrencySettings:
        return CurrencySettings()

    @property
    def ocr(self) -> OcrSettings:
        return OcrSettings()

    @property
    def rates(self) -> ExchangeRateSettings:
        return ExchangeRateSettings()

    @property
    def mindee(self) -> MindeeSettings:
        return MindeeSettings()

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

    groups = {
        "currency": lambda: settings.currency,
        "ocr": lambda: settings.ocr,
        "rates": lambda: settings.rates,
        "mindee": lambda: settings.mindee,
        "app": lambda: settings.app,
    }

    for name, load in groups.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
