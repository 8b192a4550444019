"""
Rate source registry - maps configured source names to adapter classes.
"""

import logging
from enum import Enum

from apps.exchange.application.config import ExchangeConfig
from apps.exchange.domain.interfaces import BaseRateSource
from apps.exchange.infrastructure.providers.exchange_rate import ExchangeRateApiSource
from apps.exchange.infrastructure.providers.fallback import FallbackRateSource

logger = logging.getLogger(__name__)


class RateSourceName(str, Enum):
    """
    Available rate sources.
    AUTO picks EXCHANGE_RATE when API credentials are configured, FALLBACK otherwise.
    """

    AUTO = "auto"
    EXCHANGE_RATE = "exchange_rate"
    FALLBACK = "fallback"


def _build_exchange_rate(config: ExchangeConfig) -> BaseRateSource:
    return ExchangeRateApiSource(
        base_url=config.api_base_url,
        api_key=config.api_key,
        timeout=config.fetch_timeout_seconds,
    )


def _build_fallback(config: ExchangeConfig) -> BaseRateSource:
    return FallbackRateSource()


# Registry: maps RateSourceName to a factory for the corresponding adapter
RATE_SOURCE_REGISTRY = {
    RateSourceName.EXCHANGE_RATE: _build_exchange_rate,
    RateSourceName.FALLBACK: _build_fallback,
}


def get_rate_source(config: ExchangeConfig) -> BaseRateSource:
    """
    Build the rate source selected by the configuration.

    Raises:
        ValueError: if the configured name is not a known source
    """
    name = RateSourceName(config.rate_source)

    if name is RateSourceName.AUTO:
        name = RateSourceName.EXCHANGE_RATE if config.has_api_credentials else RateSourceName.FALLBACK
    elif name is RateSourceName.EXCHANGE_RATE and not config.has_api_credentials:
        logger.warning("EXCHANGE_RATE_API_KEY is not configured; using the fallback rate table")
        name = RateSourceName.FALLBACK

    logger.info("Using rate source: %s", name.value)
    return RATE_SOURCE_REGISTRY[name](config)
