from abc import ABC, abstractmethod
from decimal import Decimal


class BaseRateSource(ABC):
    @abstractmethod
    def fetch_pair_rate(self, base_currency: str, target_currency: str) -> Decimal | None:
        """Return the current rate for the pair, or None when the source cannot provide it."""
        pass
