"""
Composition root for the exchange services.
Builds one service graph per process so the in-flight fetch map is shared by
every request handled in it.
"""

from datetime import timedelta
from functools import lru_cache

from django.utils import timezone

from apps.exchange.application.config import ExchangeConfig
from apps.exchange.domain.services import ExchangeRateService, QuoteService
from apps.exchange.infrastructure.cache.quote_store import QuoteStore
from apps.exchange.infrastructure.cache.rate_cache import RateCache
from apps.exchange.infrastructure.persistence.repositories import CurrencyExchangeRateRepository
from apps.exchange.infrastructure.providers.registry import get_rate_source


def build_exchange_rate_service(config: ExchangeConfig, clock=timezone.now) -> ExchangeRateService:
    cache = RateCache(
        CurrencyExchangeRateRepository(),
        ttl=timedelta(seconds=config.cache_ttl_seconds),
        clock=clock,
    )
    return ExchangeRateService(
        source=get_rate_source(config),
        cache=cache,
        config=config,
        clock=clock,
    )


@lru_cache(maxsize=None)
def get_exchange_rate_service() -> ExchangeRateService:
    return build_exchange_rate_service(ExchangeConfig.from_settings())


@lru_cache(maxsize=None)
def get_quote_service() -> QuoteService:
    rates = get_exchange_rate_service()
    return QuoteService(rates, rates.config)


def get_quote_store() -> QuoteStore:
    return QuoteStore()


def reset_services() -> None:
    """Forget the memoised graph, e.g. after settings change."""
    get_quote_service.cache_clear()
    get_exchange_rate_service.cache_clear()
