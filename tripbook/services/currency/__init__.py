"""Currency conversion and exchange-rate services."""

from tripbook.services.currency.converter import (
    CURRENCY_CYCLE,
    DEFAULT_RATES,
    CurrencyConverter,
    next_currency,
    resolve_rate,
)
from tripbook.services.currency.rates import (
    ExchangeRateError,
    ExchangeRates,
    ExchangeRateService,
)

__all__ = [
    "CURRENCY_CYCLE",
    "DEFAULT_RATES",
    "CurrencyConverter",
    "next_currency",
    "resolve_rate",
    "ExchangeRateError",
    "ExchangeRates",
    "ExchangeRateService",
]
