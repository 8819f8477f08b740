"""
Exchange Rate Service

Owns the network side of currency conversion: fetching rates relative
to the base currency and deciding when they are too old.

DESIGN DECISION: Rates are refreshed at most once per staleness window
(24 hours by default). A failed refresh never leaves the caller without
rates: the last good rates are kept, and before the first success the
built-in defaults are used. After a failure get_rates() serves that
fallback without touching the network until the retry window (15
minutes by default) has passed. Failures are audited, not raised, from
get_rates(); fetch_rates() is the strict variant that raises.
"""

import json
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from tripbook.config import get_settings
from tripbook.config.settings import ExchangeRateSettings
from tripbook.models.audit import AuditEventBuilder
from tripbook.models.trip import utc_now
from tripbook.services.currency.converter import DEFAULT_RATES

if TYPE_CHECKING:
    from tripbook.audit import AuditLogger


class ExchangeRateError(Exception):
    """Rates could not be fetched or understood."""
    pass


class ExchangeRates(BaseModel):
    """A set of rates: 1 `base` = rates[code] units of `code`."""

    base: str
    rates: dict[str, Decimal] = Field(default_factory=dict)
    fetched_at: Optional[datetime] = Field(
        default=None,
        description="None for built-in defaults"
    )
    source: str = Field(default="network", pattern="^(network|default)$")

    def is_stale(self, now: datetime, max_age: timedelta) -> bool:
        if self.fetched_at is None:
            return True
        return now - self.fetched_at >= max_age

    @classmethod
    def defaults(cls) -> "ExchangeRates":
        return cls(
            base="EUR",
            rates={c.value: r for c, r in DEFAULT_RATES.items()},
            source="default",
        )


class _RatesResponse(BaseModel):
    base: str
    rates: dict[str, Decimal]


class ExchangeRateService:
    """
    Fetches and caches exchange rates.

    The HTTP client is injectable so tests can use httpx.MockTransport.
    """

    def __init__(
        self,
        settings: Optional[ExchangeRateSettings] = None,
        client: Optional[httpx.Client] = None,
        audit_logger: Optional["AuditLogger"] = None,
        clock=utc_now,
        base_currency: Optional[str] = None,
    ):
        self._settings = settings or get_settings().rates
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self._settings.timeout_seconds)
        self._audit_logger = audit_logger
        self._clock = clock
        self._base = base_currency or get_settings().currency.base_currency
        self._cached: Optional[ExchangeRates] = None
        self._failed_at: Optional[datetime] = None

    @property
    def cached(self) -> Optional[ExchangeRates]:
        return self._cached

    @property
    def base_currency(self) -> str:
        return self._base

    @property
    def max_age(self) -> timedelta:
        return timedelta(hours=self._settings.stale_after_hours)

    @property
    def retry_after(self) -> timedelta:
        return timedelta(minutes=self._settings.retry_after_minutes)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ExchangeRateService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def fetch_rates(self) -> ExchangeRates:
        """
        Fetch current rates from the endpoint.

        Raises:
            ExchangeRateError: network failure, HTTP error, or a body
                               without a usable rates map
        """
        params = {"base": self._base, "symbols": ",".join(self._settings.symbols_list)}
        try:
            response = self._client.get(self._settings.endpoint_url, params=params)
            response.raise_for_status()
            body = json.loads(response.text, parse_float=Decimal)
            parsed = _RatesResponse.model_validate(body)
        except httpx.HTTPError as e:
            raise ExchangeRateError(f"Rate request failed: {e}") from e
        except (ValueError, ValidationError) as e:
            raise ExchangeRateError(f"Unexpected rate response: {e}") from e

        rates = {code.upper(): rate for code, rate in parsed.rates.items() if rate > 0}
        if not rates:
            raise ExchangeRateError("Rate response contained no rates")

        rates[parsed.base.upper()] = Decimal(1)
        return ExchangeRates(
            base=parsed.base.upper(),
            rates=rates,
            fetched_at=self._clock(),
        )

    def refresh(self) -> ExchangeRates:
        """Fetch now, falling back to cached or default rates on failure."""
        try:
            rates = self.fetch_rates()
        except ExchangeRateError as e:
            self._failed_at = self._clock()
            fallback = self._fallback()
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.rates_fetch_failed(
                    error_message=str(e),
                    used_fallback="cached" if self._cached else "default",
                ))
            return fallback

        self._cached = rates
        self._failed_at = None
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.rates_fetched(
                base=rates.base,
                currencies=sorted(rates.rates),
            ))
        return rates

    def get_rates(self) -> ExchangeRates:
        """Cached rates while fresh, the fallback inside the retry window, otherwise a refresh."""
        now = self._clock()
        if self._cached and not self._cached.is_stale(now, self.max_age):
            return self._cached
        if self._failed_at is not None and now - self._failed_at < self.retry_after:
            return self._fallback()
        return self.refresh()

    def _fallback(self) -> ExchangeRates:
        return self._cached or ExchangeRates.defaults()
