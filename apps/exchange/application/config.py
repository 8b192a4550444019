"""
Configuration objects handed to the exchange services.
Built from Django settings at the composition root; tests build them directly.
"""

from dataclasses import dataclass
from decimal import Decimal

PLACEHOLDER_API_KEY = "your-api-key-here"


@dataclass(frozen=True)
class ExchangeConfig:
    rate_source: str = "auto"
    api_key: str = ""
    api_base_url: str = "https://v6.exchangerate-api.com/v6"
    cache_ttl_seconds: int = 30 * 60
    fetch_timeout_seconds: float = 10.0
    fee_percent: Decimal = Decimal("1.5")
    minimum_fee: Decimal = Decimal("2.99")
    quote_ttl_seconds: int = 15 * 60
    min_amount: Decimal = Decimal("10")
    max_amount: Decimal = Decimal("10000")

    @property
    def has_api_credentials(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY and bool(self.api_base_url)

    @classmethod
    def from_settings(cls) -> "ExchangeConfig":
        from django.conf import settings

        return cls(
            rate_source=settings.RATE_SOURCE,
            api_key=settings.EXCHANGE_RATE_API_KEY,
            api_base_url=settings.EXCHANGE_RATE_BASE_URL,
            cache_ttl_seconds=settings.RATE_CACHE_TTL_SECONDS,
            fetch_timeout_seconds=settings.RATE_FETCH_TIMEOUT_SECONDS,
            fee_percent=Decimal(str(settings.SERVICE_FEE_PERCENT)),
            minimum_fee=Decimal(str(settings.MINIMUM_FEE)),
            quote_ttl_seconds=settings.QUOTE_TTL_SECONDS,
            min_amount=Decimal(str(settings.TRANSFER_MIN_AMOUNT)),
            max_amount=Decimal(str(settings.TRANSFER_MAX_AMOUNT)),
        )
