"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from apps.exchange.domain.models import ExchangeRate
from apps.exchange.infrastructure.persistence.models import CurrencyExchangeRate


class CurrencyExchangeRateRepository:
    """Repository for the cached CurrencyExchangeRate rows."""

    @staticmethod
    def _to_domain(row: CurrencyExchangeRate) -> ExchangeRate:
        return ExchangeRate(
            base_currency=row.base_currency,
            target_currency=row.target_currency,
            rate=row.rate,
            fetched_at=row.fetched_at,
        )

    def get(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        """Get the cached rate for a pair regardless of its age."""
        row = CurrencyExchangeRate.objects.filter(
            base_currency=base_currency,
            target_currency=target_currency,
        ).first()
        return self._to_domain(row) if row else None

    def upsert(
        self,
        base_currency: str,
        target_currency: str,
        rate: Decimal,
        fetched_at: datetime
    ) -> ExchangeRate:
        """Insert or overwrite the rate for a pair."""
        row, _ = CurrencyExchangeRate.objects.update_or_create(
            base_currency=base_currency,
            target_currency=target_currency,
            defaults={"rate": rate, "fetched_at": fetched_at},
        )
        return self._to_domain(row)
