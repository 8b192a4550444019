"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List


@dataclass
class CalculationResultDTO:
    """Result DTO for an unbounded fee calculation."""
    send_amount: Decimal
    send_currency: str
    receive_amount: Decimal
    receive_currency: str
    exchange_rate: Decimal
    fee: Decimal
    fee_percent: Decimal
    total_to_pay: Decimal
    rate_timestamp: datetime
    stale: bool = False


@dataclass
class RateWarmupResultDTO:
    """Result DTO for the cache warm-up task."""
    success: bool
    base_currency: str
    rates_resolved: int = 0
    stale_rates: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
