"""
Transfer lifecycle vocabulary and the authoritative transition table.
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Mapping, Optional


class TransferStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def choices(cls):
        return [(status.value, status.name.title()) for status in cls]


ALLOWED_TRANSITIONS: Mapping[TransferStatus, FrozenSet[TransferStatus]] = {
    TransferStatus.PENDING: frozenset({TransferStatus.PROCESSING, TransferStatus.CANCELLED}),
    TransferStatus.PROCESSING: frozenset({
        TransferStatus.COMPLETED,
        TransferStatus.FAILED,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.FAILED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
    TransferStatus.REFUNDED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({TransferStatus.PENDING, TransferStatus.PROCESSING})


def can_transition(current: TransferStatus, new: TransferStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def is_terminal(status: TransferStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


class DeliveryMethod(str, Enum):
    BANK_DEPOSIT = "bank_deposit"
    MOBILE_WALLET = "mobile_wallet"
    CASH_PICKUP = "cash_pickup"

    @classmethod
    def choices(cls):
        return [(method.value, method.name.replace("_", " ").title()) for method in cls]


class PaymentMethod(str, Enum):
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    DEBIT = "debit"

    @classmethod
    def choices(cls):
        return [(method.value, method.name.replace("_", " ").title()) for method in cls]


def delivery_days(delivery_method: str) -> int:
    return 1 if delivery_method == DeliveryMethod.MOBILE_WALLET.value else 3


@dataclass(frozen=True)
class RecipientInfo:
    """What the recipient directory tells the ledger about a recipient."""

    id: object
    owner_user_id: object
    delivery_method: str
    country_currency: str
    first_name: str = ""
    last_name: str = ""
    country: str = ""


@dataclass(frozen=True)
class TimelineEntry:
    status: str
    timestamp: datetime


@dataclass(frozen=True)
class TrackingView:
    """Public projection of a transfer; safe to show to anyone holding the reference."""

    reference_number: str
    status: str
    recipient_first_name: str
    destination_country: str
    send_amount: Decimal
    send_currency: str
    receive_amount: Decimal
    receive_currency: str
    estimated_delivery: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    timeline: List[TimelineEntry] = field(default_factory=list)
