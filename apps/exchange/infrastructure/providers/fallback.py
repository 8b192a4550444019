"""
Fallback rate table for development and for deployments without API credentials.
Returns fixed USD rates with a small random variation per call.
"""

import logging
import random
from decimal import Decimal, ROUND_HALF_UP

from apps.exchange.domain.interfaces import BaseRateSource

logger = logging.getLogger(__name__)


class FallbackRateSource(BaseRateSource):
    """
    Fixed (base, target) -> rate table.
    Useful for:
    - Development without API keys
    - Demos where realistic, slightly moving rates are enough
    """

    RATES = {
        "USD": {
            "MXN": Decimal("17.15"),
            "PHP": Decimal("55.89"),
            "INR": Decimal("83.12"),
            "COP": Decimal("3950.00"),
            "GTQ": Decimal("7.82"),
            "DOP": Decimal("58.50"),
            "HNL": Decimal("24.72"),
            "NGN": Decimal("1550.00"),
            "GHS": Decimal("15.20"),
            "KES": Decimal("153.50"),
            "VND": Decimal("24500.00"),
            "CNY": Decimal("7.24"),
            "GBP": Decimal("0.79"),
            "EUR": Decimal("0.92"),
            "USD": Decimal("1.00"),
        },
    }

    # Relative spread of the per-call variation (±1%)
    JITTER = 0.01

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def base_rate(self, base_currency: str, target_currency: str) -> Decimal | None:
        return self.RATES.get(base_currency, {}).get(target_currency)

    def fetch_pair_rate(
        self,
        base_currency: str,
        target_currency: str
    ) -> Decimal | None:
        """
        Return the table rate for the pair with a small random variation.

        Returns:
            Rate rounded to 6 decimal places, or None for pairs not in the table
        """
        base_rate = self.base_rate(base_currency, target_currency)
        if base_rate is None:
            logger.warning("No fallback rate for %s/%s", base_currency, target_currency)
            return None

        variation = Decimal(str(self.rng.uniform(-self.JITTER, self.JITTER)))
        rate = base_rate * (Decimal(1) + variation)

        return rate.quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP)
