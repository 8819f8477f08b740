"""Configuration package."""

from tripbook.config.settings import (
    AppSettings,
    CurrencySettings,
    ExchangeRateSettings,
    MindeeSettings,
    OcrSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CurrencySettings",
    "ExchangeRateSettings",
    "MindeeSettings",
    "OcrSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
