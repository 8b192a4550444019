"""
Celery tasks for background processing.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Dict, List, Optional

from celery import shared_task
from django.db import connection

from apps.exchange.application.dto import RateWarmupResultDTO
from apps.exchange.application.factory import get_exchange_rate_service
from apps.exchange.domain.exceptions import RateUnavailable
from apps.exchange.domain.models import RateResult
from apps.exchange.domain.services import SUPPORTED_CURRENCIES, ExchangeRateService

logger = logging.getLogger(__name__)


def _resolve_rate(service: ExchangeRateService, base_code: str, target_code: str) -> RateResult:
    try:
        return service.get_rate(base_code, target_code)
    finally:
        # Worker threads open their own connection; don't leak it.
        connection.close()


async def fetch_rate_async(
    service: ExchangeRateService,
    base_code: str,
    target_code: str
) -> RateResult:
    """
    Resolve a rate asynchronously by running the synchronous service
    in a thread pool via asyncio.to_thread.
    """
    return await asyncio.to_thread(_resolve_rate, service, base_code, target_code)


async def fetch_rates_for_base(
    service: ExchangeRateService,
    base_code: str,
    currencies: List[str]
) -> List:
    """
    Resolve every base/currency pair concurrently.
    Overlapping lookups for one pair share a single upstream call.
    """
    tasks = [fetch_rate_async(service, base_code, code) for code in currencies if code != base_code]
    return await asyncio.gather(*tasks, return_exceptions=True)


@shared_task(name="warm_rate_cache")
def warm_rate_cache(base_currency: str = "USD", currencies: Optional[List[str]] = None) -> Dict:
    """
    Pre-fill the rate cache for a base currency.

    Args:
        base_currency: Base currency code
        currencies: Target currency codes (defaults to every supported currency)

    Returns:
        Dict with operation results
    """
    base_currency = base_currency.upper()
    currencies = [c.upper() for c in (currencies or SUPPORTED_CURRENCIES)]
    service = get_exchange_rate_service()

    logger.info("Warming rate cache for %s against %d currencies", base_currency, len(currencies))
    results = asyncio.run(fetch_rates_for_base(service, base_currency, currencies))

    summary = RateWarmupResultDTO(success=True, base_currency=base_currency)
    for result in results:
        if isinstance(result, RateUnavailable):
            summary.errors.append(result.message)
        elif isinstance(result, Exception):
            logger.error("Unexpected error warming rate cache: %s", result, exc_info=result)
            summary.errors.append(str(result))
        else:
            summary.rates_resolved += 1
            if result.stale:
                summary.stale_rates.append(result.target_currency)

    summary.success = summary.rates_resolved > 0
    return asdict(summary)
