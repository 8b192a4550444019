"""
Durable keyed store of (base, target) -> (rate, fetched_at) with a freshness window.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from apps.exchange.domain.models import ExchangeRate
from apps.exchange.infrastructure.persistence.repositories import CurrencyExchangeRateRepository


class RateCache:

    def __init__(
        self,
        repository: CurrencyExchangeRateRepository,
        ttl: timedelta,
        clock: Callable[[], datetime],
    ):
        self.repository = repository
        self.ttl = ttl
        self.clock = clock

    def is_fresh(self, entry: ExchangeRate) -> bool:
        return self.clock() - entry.fetched_at < self.ttl

    def get_fresh(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        entry = self.repository.get(base_currency, target_currency)
        if entry is not None and self.is_fresh(entry):
            return entry
        return None

    def get_any(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        """Return the entry for the pair ignoring the TTL."""
        return self.repository.get(base_currency, target_currency)

    def put(self, base_currency: str, target_currency: str, rate: Decimal) -> ExchangeRate:
        return self.repository.upsert(base_currency, target_currency, rate, self.clock())
