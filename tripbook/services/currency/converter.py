"""
Currency Converter

Converts base-currency amounts for display and turns user-typed
display amounts back into base currency for storage.

CRITICAL: Storage is always base currency. A display amount goes
through to_base exactly once, at entry time, and is persisted at six
decimal places. Rounding to whole units happens only on the way out
(convert/format), never on what is stored.

The converter never fetches rates. It is handed one; where that rate
comes from (network, defaults, user entry) is resolve_rate's and the
ExchangeRateService's business.
"""

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from tripbook.models.trip import CURRENCY_SYMBOLS, Currency, quantize_amount

# 1 EUR = X units. Used whenever no fetched rate is available.
DEFAULT_RATES: dict[Currency, Decimal] = {
    Currency.EUR: Decimal("1"),
    Currency.KRW: Decimal("1450"),
    Currency.USD: Decimal("1.08"),
    Currency.JPY: Decimal("165"),
    Currency.CNY: Decimal("7.8"),
}

CURRENCY_CYCLE: tuple[Currency, ...] = tuple(Currency)

_WHOLE = Decimal(1)
_CENTS = Decimal("0.01")


def next_currency(current: Currency) -> Currency:
    """The display currency after `current`, wrapping around."""
    index = CURRENCY_CYCLE.index(current)
    return CURRENCY_CYCLE[(index + 1) % len(CURRENCY_CYCLE)]


def resolve_rate(
    currency: Union[Currency, str],
    fetched: Optional[Mapping[str, Decimal]] = None,
    manual: Optional[Decimal] = None,
    base_currency: Union[Currency, str] = Currency.EUR,
) -> Decimal:
    """
    Pick the rate (1 base = X display) for a currency.

    Order: the base currency is always 1; then a positive manual rate;
    then the fetched rate; then DEFAULT_RATES.

    Raises:
        ValueError: no usable rate for the currency
    """
    currency = Currency(currency)
    if currency == Currency(base_currency):
        return Decimal(1)
    if manual is not None and manual > 0:
        return Decimal(manual)
    if fetched:
        rate = fetched.get(currency.value)
        if rate is not None and Decimal(rate) > 0:
            return Decimal(rate)
    if currency in DEFAULT_RATES and Currency(base_currency) == Currency.EUR:
        return DEFAULT_RATES[currency]
    raise ValueError(f"No exchange rate available for {currency.value}")


def _group(value: Decimal) -> str:
    """Thousands-grouped, two decimals only when there is a fraction."""
    cents = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    if cents == cents.to_integral_value():
        return f"{int(cents):,}"
    return f"{cents:,.2f}"


class CurrencyConverter:
    """
    Base <-> display conversion at one fixed rate.

    Args:
        display_currency: Currency amounts are shown in
        rate: 1 base unit = `rate` display units
        base_currency: Currency amounts are stored in
    """

    def __init__(
        self,
        display_currency: Union[Currency, str] = Currency.EUR,
        rate: Union[Decimal, int, str] = 1,
        base_currency: Union[Currency, str] = Currency.EUR,
    ):
        self.display_currency = Currency(display_currency)
        self.base_currency = Currency(base_currency)
        rate = Decimal(1) if self.is_identity else Decimal(str(rate))
        if rate <= 0:
            raise ValueError("Exchange rate must be positive")
        self.rate = rate

    @classmethod
    def for_currency(
        cls,
        display_currency: Union[Currency, str],
        fetched: Optional[Mapping[str, Decimal]] = None,
        manual: Optional[Decimal] = None,
        base_currency: Union[Currency, str] = Currency.EUR,
    ) -> "CurrencyConverter":
        rate = resolve_rate(display_currency, fetched, manual, base_currency)
        return cls(display_currency, rate, base_currency)

    @property
    def is_identity(self) -> bool:
        return self.display_currency == self.base_currency

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self.display_currency]

    def convert(self, amount_base: Decimal) -> Decimal:
        """Base amount in display units, rounded half-up to a whole unit."""
        amount_base = Decimal(amount_base)
        if self.is_identity:
            return amount_base
        return (amount_base * self.rate).quantize(_WHOLE, rounding=ROUND_HALF_UP)

    def to_base(self, amount_display: Decimal) -> Decimal:
        """Display amount in base units, at storage precision."""
        amount_display = Decimal(amount_display)
        if self.is_identity:
            return quantize_amount(amount_display)
        return quantize_amount(amount_display / self.rate)

    def format(self, amount_base: Decimal) -> str:
        """
        Symbol-prefixed display string.

        "€12", "€12.50", "$1,234.57", "₩18,125". Whole amounts never show
        ".00". KRW and JPY are always whole.
        """
        amount_base = Decimal(amount_base)
        value = amount_base * self.rate
        if not self.display_currency.has_minor_unit:
            whole = value.quantize(_WHOLE, rounding=ROUND_HALF_UP)
            return f"{self.symbol}{whole:,}"
        return f"{self.symbol}{_group(value)}"

    def format_base(self, amount_base: Decimal) -> str:
        return CurrencyConverter(self.base_currency, 1, self.base_currency).format(amount_base)

    def format_with_both(self, amount_base: Decimal) -> str:
        """Display amount followed by the base amount: "₩14,500 (€10)"."""
        base = self.format_base(amount_base)
        if self.is_identity:
            return base
        return f"{self.format(amount_base)} ({base})"
