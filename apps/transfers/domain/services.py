"""
Domain services - Core business logic.
TransferLedger owns transfer records, their lifecycle and their status history.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.exchange.domain.calculator import round2, validate_send_amount
from apps.exchange.domain.models import Quote
from apps.transfers.application.config import TransferConfig
from apps.transfers.domain.exceptions import (
    CurrencyMismatch,
    IllegalTransition,
    InvalidPaymentMethod,
    NotCancellable,
    QuoteExpired,
    ReferenceCollision,
    TransferNotFound,
)
from apps.transfers.domain.models import (
    CANCELLABLE_STATUSES,
    PaymentMethod,
    RecipientInfo,
    TimelineEntry,
    TrackingView,
    TransferStatus,
    can_transition,
    delivery_days,
)
from apps.transfers.domain.references import generate_reference_number
from apps.transfers.infrastructure.locks import KeyedLocks
from apps.transfers.infrastructure.persistence.models import Transfer, TransferStatusHistory
from apps.transfers.infrastructure.persistence.repositories import TransferRepository

logger = logging.getLogger(__name__)

INITIATED_NOTE = "Transfer initiated"
CANCELLED_BY_USER_NOTE = "Cancelled by user"


class TransferLedger:
    """
    State machine over transfer records.

    Every status change goes through `_apply_transition`, which checks the
    transition table and appends exactly one history entry. Reads and writes
    for one transfer are serialised by a per-record lock and a row lock.
    """

    def __init__(
        self,
        transfers: TransferRepository,
        config: TransferConfig,
        clock: Callable[[], datetime] = timezone.now,
        locks: KeyedLocks | None = None,
        reference_generator: Callable[[str, datetime], str] = generate_reference_number,
    ):
        self.transfers = transfers
        self.config = config
        self.clock = clock
        self.locks = locks or KeyedLocks()
        self.reference_generator = reference_generator

    def create(
        self,
        user_id,
        recipient: RecipientInfo,
        send_amount,
        receive_currency: str,
        payment_method: str,
        quote: Quote,
        notes: Optional[str] = None,
    ) -> Transfer:
        """
        Persist a transfer for an accepted quote, starting in `processing`.

        Raises:
            InvalidAmount, CurrencyMismatch, InvalidPaymentMethod, QuoteExpired,
            ReferenceCollision
        """
        amount = round2(validate_send_amount(send_amount, self.config.min_amount, self.config.max_amount))
        receive_currency = receive_currency.upper()

        if receive_currency != recipient.country_currency:
            raise CurrencyMismatch(f"Recipient's country uses {recipient.country_currency}")

        try:
            payment_method = PaymentMethod(payment_method).value
        except ValueError:
            raise InvalidPaymentMethod(f"Unsupported payment method '{payment_method}'")

        now = self.clock()
        if not quote.matches(amount, self.config.send_currency, receive_currency):
            raise QuoteExpired("Quote does not match the requested transfer; request a new quote")
        if quote.is_expired(now):
            raise QuoteExpired(f"Quote expired at {quote.expires_at.isoformat()}; request a new quote")

        fields = dict(
            user_id=user_id,
            recipient_id=recipient.id,
            send_amount=quote.send_amount,
            send_currency=quote.send_currency,
            receive_amount=quote.receive_amount,
            receive_currency=quote.receive_currency,
            exchange_rate=quote.exchange_rate,
            fee_amount=quote.fee,
            total_amount=quote.total_amount,
            delivery_method=recipient.delivery_method,
            status=TransferStatus.PROCESSING.value,
            payment_method=payment_method,
            estimated_delivery=now + timedelta(days=delivery_days(recipient.delivery_method)),
            notes=notes or None,
            created_at=now,
            updated_at=now,
        )

        for attempt in range(1, self.config.reference_max_attempts + 1):
            reference_number = self.reference_generator(self.config.reference_prefix, now)
            try:
                with transaction.atomic():
                    transfer = self.transfers.create(reference_number=reference_number, **fields)
                    self.transfers.append_history(transfer, transfer.status, INITIATED_NOTE, now)
            except IntegrityError:
                if not self.transfers.reference_exists(reference_number):
                    raise
                logger.warning(
                    "Reference number collision on %s (attempt %d/%d)",
                    reference_number, attempt, self.config.reference_max_attempts,
                )
                continue

            logger.info("Transfer %s created for user %s", transfer.reference_number, user_id)
            return transfer

        raise ReferenceCollision(
            f"Could not allocate a unique reference number after {self.config.reference_max_attempts} attempts"
        )

    def transition(self, transfer_id, new_status, notes: Optional[str] = None) -> Transfer:
        """
        Move a transfer to a new status and record it in the history.

        Raises:
            TransferNotFound: unknown transfer
            IllegalTransition: the move is not in the transition table
        """
        with self.locks.hold(str(transfer_id)), transaction.atomic():
            transfer = self.transfers.get_for_update(transfer_id)
            if transfer is None:
                raise TransferNotFound("Transfer not found")
            return self._apply_transition(transfer, new_status, notes)

    def cancel(self, transfer_id, requester_id) -> Transfer:
        """
        Cancel a transfer on behalf of its owner.

        Raises:
            TransferNotFound: unknown transfer or not owned by the requester
            NotCancellable: the transfer is no longer pending or processing
        """
        with self.locks.hold(str(transfer_id)), transaction.atomic():
            transfer = self.transfers.get_for_update(transfer_id)
            if transfer is None or transfer.user_id != requester_id:
                raise TransferNotFound("Transfer not found")

            if transfer.transfer_status not in CANCELLABLE_STATUSES:
                raise NotCancellable(f"Transfer with status '{transfer.status}' cannot be cancelled")

            return self._apply_transition(transfer, TransferStatus.CANCELLED, CANCELLED_BY_USER_NOTE)

    def _apply_transition(self, transfer: Transfer, new_status, notes: Optional[str]) -> Transfer:
        try:
            new_status = TransferStatus(new_status)
        except ValueError:
            raise IllegalTransition(f"Unknown status '{new_status}'")

        current = transfer.transfer_status
        if not can_transition(current, new_status):
            raise IllegalTransition(
                f"Transfer {transfer.reference_number} cannot move from '{current.value}' to '{new_status.value}'"
            )

        now = self.clock()
        transfer.status = new_status.value
        transfer.updated_at = now
        if new_status is TransferStatus.COMPLETED:
            transfer.completed_at = now
        elif new_status is TransferStatus.FAILED:
            transfer.failure_reason = notes

        self.transfers.save_status(transfer)
        self.transfers.append_history(transfer, new_status.value, notes, now)

        logger.info(
            "Transfer %s moved %s -> %s",
            transfer.reference_number, current.value, new_status.value,
        )
        return transfer

    def get_history(self, transfer_id) -> List[TransferStatusHistory]:
        """Status history in insertion order."""
        return self.transfers.get_history(transfer_id)

    def track(self, reference_number: str) -> TrackingView:
        """
        Public projection of a transfer looked up by reference number.
        No ownership check: the reference number is the sharing token.
        """
        transfer = self.transfers.get_by_reference((reference_number or "").strip().upper())
        if transfer is None:
            raise TransferNotFound("Transfer not found")

        return TrackingView(
            reference_number=transfer.reference_number,
            status=transfer.status,
            recipient_first_name=transfer.recipient.first_name,
            destination_country=transfer.recipient.country,
            send_amount=transfer.send_amount,
            send_currency=transfer.send_currency,
            receive_amount=transfer.receive_amount,
            receive_currency=transfer.receive_currency,
            estimated_delivery=transfer.estimated_delivery,
            completed_at=transfer.completed_at,
            created_at=transfer.created_at,
            timeline=[
                TimelineEntry(status=entry.status, timestamp=entry.created_at)
                for entry in self.get_history(transfer.id)
            ],
        )
