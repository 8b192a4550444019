"""
Configuration handed to the transfer services.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TransferConfig:
    min_amount: Decimal = Decimal("10")
    max_amount: Decimal = Decimal("10000")
    send_currency: str = "USD"
    reference_prefix: str = "RF"
    reference_max_attempts: int = 5

    @classmethod
    def from_settings(cls) -> "TransferConfig":
        from django.conf import settings

        return cls(
            min_amount=Decimal(str(settings.TRANSFER_MIN_AMOUNT)),
            max_amount=Decimal(str(settings.TRANSFER_MAX_AMOUNT)),
            reference_prefix=settings.REFERENCE_PREFIX,
            reference_max_attempts=settings.REFERENCE_MAX_ATTEMPTS,
        )
