"""
Domain services - Core business logic.
Implements rate resolution (cache, upstream fetch, stale fallback) and quoting.
"""

import logging
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict

from django.utils import timezone

from apps.exchange.application.config import ExchangeConfig
from apps.exchange.domain.calculator import QuoteCalculator, validate_send_amount
from apps.exchange.domain.exceptions import RateUnavailable
from apps.exchange.domain.interfaces import BaseRateSource
from apps.exchange.domain.models import Quote, RateResult
from apps.exchange.infrastructure.cache.rate_cache import RateCache
from apps.exchange.infrastructure.cache.single_flight import SingleFlight

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = [
    "MXN", "PHP", "INR", "COP", "GTQ", "DOP", "HNL",
    "NGN", "GHS", "KES", "VND", "CNY", "GBP", "EUR",
]

# Waiters on an in-flight fetch give up this long after the fetch timeout itself.
WAIT_MARGIN_SECONDS = 2.0


class ExchangeRateService:
    """
    Resolves exchange rates with caching and degraded-mode fallback.

    Resolution order:
    1. Fresh cache entry (younger than the TTL)
    2. Rate source, one in-flight call per currency pair
    3. Cache entry of any age, flagged stale
    4. RateUnavailable
    """

    def __init__(
        self,
        source: BaseRateSource,
        cache: RateCache,
        config: ExchangeConfig,
        single_flight: SingleFlight | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.source = source
        self.cache = cache
        self.config = config
        self.single_flight = single_flight or SingleFlight()
        self.clock = clock

    def get_rate(self, base_currency: str, target_currency: str) -> RateResult:
        """
        Get the rate for a currency pair.

        Example:
            >>> result = service.get_rate("USD", "MXN")
            >>> result.rate, result.stale
            (Decimal('17.150000'), False)
        """
        base_currency = base_currency.upper()
        target_currency = target_currency.upper()

        cached = self.cache.get_fresh(base_currency, target_currency)
        if cached is not None:
            logger.debug("Rate cache hit: %s/%s", base_currency, target_currency)
            return RateResult(base_currency, target_currency, cached.rate, cached.fetched_at)

        try:
            return self.single_flight.do(
                (base_currency, target_currency),
                lambda: self._refresh(base_currency, target_currency),
                timeout=self.config.fetch_timeout_seconds + WAIT_MARGIN_SECONDS,
            )
        except FutureTimeout:
            logger.warning("Timed out waiting for in-flight fetch of %s/%s", base_currency, target_currency)
            return self._stale_or_fail(base_currency, target_currency)

    def _refresh(self, base_currency: str, target_currency: str) -> RateResult:
        # A caller that finished just before us may have refreshed the entry.
        cached = self.cache.get_fresh(base_currency, target_currency)
        if cached is not None:
            return RateResult(base_currency, target_currency, cached.rate, cached.fetched_at)

        logger.info("Fetching rate %s/%s from %s", base_currency, target_currency, self.source.__class__.__name__)
        try:
            rate = self.source.fetch_pair_rate(base_currency, target_currency)
        except Exception:
            logger.warning(
                "Rate source %s failed for %s/%s",
                self.source.__class__.__name__, base_currency, target_currency,
                exc_info=True,
            )
            rate = None

        if rate is None:
            return self._stale_or_fail(base_currency, target_currency)

        entry = self.cache.put(base_currency, target_currency, rate)
        return RateResult(base_currency, target_currency, entry.rate, entry.fetched_at)

    def _stale_or_fail(self, base_currency: str, target_currency: str) -> RateResult:
        stale = self.cache.get_any(base_currency, target_currency)
        if stale is not None:
            logger.warning(
                "Serving stale rate %s/%s fetched at %s",
                base_currency, target_currency, stale.fetched_at.isoformat(),
            )
            return RateResult(base_currency, target_currency, stale.rate, stale.fetched_at, stale=True)

        raise RateUnavailable(f"Unable to fetch exchange rate for {base_currency}/{target_currency}")

    def get_all_rates(self, base_currency: str = "USD") -> Dict:
        """
        Get rates from a base currency to every supported currency.
        Currencies whose rate cannot be resolved are left out.
        """
        base_currency = base_currency.upper()
        rates: Dict[str, Decimal] = {}

        for currency in SUPPORTED_CURRENCIES:
            try:
                rates[currency] = self.get_rate(base_currency, currency).rate
            except RateUnavailable as e:
                logger.error("Failed to get rate for %s: %s", currency, e)

        return {
            "base": base_currency,
            "rates": rates,
            "timestamp": self.clock(),
        }


class QuoteService:
    """Issues time-boxed quotes from a resolved rate and the configured fee schedule."""

    def __init__(
        self,
        rates: ExchangeRateService,
        config: ExchangeConfig,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.rates = rates
        self.config = config
        self.clock = clock

    def issue(self, send_amount, send_currency: str, receive_currency: str) -> Quote:
        """
        Validate the amount, resolve the rate and compute fees.
        The amount is checked before any rate lookup.
        """
        amount = validate_send_amount(send_amount, self.config.min_amount, self.config.max_amount)
        rate = self.rates.get_rate(send_currency, receive_currency)

        calculation = QuoteCalculator.calculate(
            amount,
            rate.rate,
            self.config.fee_percent,
            self.config.minimum_fee,
        )

        issued_at = self.clock()
        return Quote(
            send_amount=calculation.send_amount,
            send_currency=rate.base_currency,
            receive_amount=calculation.receive_amount,
            receive_currency=rate.target_currency,
            exchange_rate=calculation.exchange_rate,
            fee=calculation.fee,
            total_amount=calculation.total_amount,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self.config.quote_ttl_seconds),
            rate_timestamp=rate.timestamp,
            stale=rate.stale,
        )
