"""
Receipt Amount Extractor

Turns noisy recognised receipt text into a single (amount, currency)
guess, or None.

DESIGN DECISION: An ordered pattern cascade, first acceptable match wins:
1. EUR (€ prefix/suffix, EUR token)
2. USD ($ prefix/suffix, USD token)
3. CNY keywords (元, RMB, CNY)
4. JPY keywords (円, JPY)
5. The bare ¥/￥ sign, which both JPY and CNY use, resolved to JPY

Unambiguous markers always beat the shared yen sign. If nothing tagged
matches, any "digits.dd" number is taken in the default currency.

CRITICAL: A parsed value is only accepted if 0 < value < ceiling. The
ceiling is much higher for currencies without a minor unit. Anything
else (zero, absurdly large numbers from OCR noise) counts as no match
and the cascade moves on to the next pattern.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from tripbook.config import get_settings
from tripbook.config.settings import OcrSettings
from tripbook.models.receipt import ExtractedAmount
from tripbook.models.trip import Currency


_AMOUNT = r"(\d{1,6}[.,]\d{2})"
_LOOSE = r"(\d{1,6}[.,]?\d{0,2})"
_LOOSE_WIDE = r"(\d{1,8}[.,]?\d{0,2})"

PATTERN_CASCADE: tuple[tuple[re.Pattern, Currency], ...] = (
    # EUR
    (re.compile(r"€\s*" + _AMOUNT), Currency.EUR),
    (re.compile(r"€\s*(\d{1,6})"), Currency.EUR),
    (re.compile(_AMOUNT + r"\s*€"), Currency.EUR),
    (re.compile(r"EUR\s*" + _LOOSE, re.IGNORECASE), Currency.EUR),
    # USD
    (re.compile(r"\$\s*" + _AMOUNT), Currency.USD),
    (re.compile(r"\$\s*(\d{1,6})"), Currency.USD),
    (re.compile(_AMOUNT + r"\s*\$"), Currency.USD),
    (re.compile(r"USD\s*" + _LOOSE, re.IGNORECASE), Currency.USD),
    # CNY keywords
    (re.compile(_LOOSE + r"\s*元"), Currency.CNY),
    (re.compile(r"RMB\s*" + _LOOSE, re.IGNORECASE), Currency.CNY),
    (re.compile(r"CNY\s*" + _LOOSE, re.IGNORECASE), Currency.CNY),
    # JPY keywords
    (re.compile(r"(\d{1,8})\s*円"), Currency.JPY),
    (re.compile(r"JPY\s*" + _LOOSE_WIDE, re.IGNORECASE), Currency.JPY),
    # Shared yen sign
    (re.compile(r"[¥￥]\s*" + _LOOSE_WIDE), Currency.JPY),
    (re.compile(r"(\d{1,8})\s*[¥￥]"), Currency.JPY),
)

FALLBACK_PATTERN = re.compile(_AMOUNT)


def parse_amount(token: str) -> Optional[Decimal]:
    """Parse a captured number; the first comma is a decimal separator."""
    try:
        value = Decimal(token.replace(",", ".", 1))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


class AmountExtractor:
    """
    Pattern-cascade amount extractor.

    Args:
        settings: OCR settings (default currency and ceilings).
                  Defaults to the application settings.
    """

    def __init__(self, settings: Optional[OcrSettings] = None):
        self._settings = settings or get_settings().ocr
        self._default_currency = Currency(self._settings.default_currency.strip().upper())

    @property
    def default_currency(self) -> Currency:
        return self._default_currency

    def ceiling(self, currency: Currency) -> Decimal:
        if currency.has_minor_unit:
            return self._settings.max_amount
        return self._settings.max_amount_no_minor_unit

    def _accept(self, match: re.Match, currency: Currency, is_fallback: bool) -> Optional[ExtractedAmount]:
        value = parse_amount(match.group(1))
        if value is None or not 0 < value < self.ceiling(currency):
            return None
        return ExtractedAmount(
            amount=value,
            currency=currency,
            matched_text=match.group(0),
            is_fallback=is_fallback,
        )

    def extract(self, text: str) -> Optional[ExtractedAmount]:
        """
        Find the most likely amount on a receipt.

        Returns None when nothing usable is found; the caller should
        then ask for manual entry.
        """
        if not text:
            return None

        for pattern, currency in PATTERN_CASCADE:
            match = pattern.search(text)
            if match:
                result = self._accept(match, currency, is_fallback=False)
                if result:
                    return result

        match = FALLBACK_PATTERN.search(text)
        if match:
            return self._accept(match, self._default_currency, is_fallback=True)
        return None


def extract_currency_amount(text: str) -> Optional[ExtractedAmount]:
    """Extract with the configured settings."""
    return AmountExtractor().extract(text)
