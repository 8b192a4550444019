"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import uuid4, UUID


@dataclass(frozen=True)
class ExchangeRate:

    base_currency: str
    target_currency: str
    rate: Decimal
    fetched_at: datetime

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        if len(self.base_currency) != 3 or len(self.target_currency) != 3:
            raise ValueError(
                f"Currency codes must be exactly 3 characters, got "
                f"'{self.base_currency}'/'{self.target_currency}'"
            )


@dataclass(frozen=True)
class RateResult:
    """A resolved rate, flagged stale when served from an expired cache entry."""

    base_currency: str
    target_currency: str
    rate: Decimal
    timestamp: datetime
    stale: bool = False


@dataclass(frozen=True)
class TransferCalculation:

    send_amount: Decimal
    fee: Decimal
    total_amount: Decimal
    exchange_rate: Decimal
    receive_amount: Decimal


@dataclass(frozen=True)
class Quote:
    """
    Time-boxed, not yet committed computation of exchange amounts and fees.
    Consumed at most once by a transfer creation.
    """

    send_amount: Decimal
    send_currency: str
    receive_amount: Decimal
    receive_currency: str
    exchange_rate: Decimal
    fee: Decimal
    total_amount: Decimal
    issued_at: datetime
    expires_at: datetime
    rate_timestamp: datetime
    stale: bool = False
    id: UUID = field(default_factory=uuid4)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def matches(self, send_amount: Decimal, send_currency: str, receive_currency: str) -> bool:
        return (
            self.send_amount == send_amount
            and self.send_currency == send_currency.upper()
            and self.receive_currency == receive_currency.upper()
        )
