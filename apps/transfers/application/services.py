"""
Application service for transfers.
Wires quoting, the recipient directory and the ledger behind one boundary
used by the API views.
"""

import logging
from typing import Optional

from apps.exchange.domain.models import Quote
from apps.exchange.domain.services import QuoteService
from apps.exchange.infrastructure.cache.quote_store import QuoteStore
from apps.transfers.application.dto import PaginationDTO, TransferDetailDTO, TransferPageDTO
from apps.transfers.domain.exceptions import QuoteExpired, TransferNotFound
from apps.transfers.domain.interfaces import BaseRecipientDirectory
from apps.transfers.domain.models import TrackingView
from apps.transfers.domain.services import TransferLedger
from apps.transfers.infrastructure.persistence.models import Transfer

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50


class TransferService:

    def __init__(
        self,
        ledger: TransferLedger,
        quotes: QuoteService,
        quote_store: QuoteStore,
        directory: BaseRecipientDirectory,
    ):
        self.ledger = ledger
        self.quotes = quotes
        self.quote_store = quote_store
        self.directory = directory

    @property
    def send_currency(self) -> str:
        return self.ledger.config.send_currency

    def quote(self, send_amount, receive_currency: str, send_currency: Optional[str] = None) -> Quote:
        """Issue a quote and keep it until it expires."""
        quote = self.quotes.issue(send_amount, send_currency or self.send_currency, receive_currency)
        self.quote_store.save(quote, self.quotes.config.quote_ttl_seconds)
        logger.info(
            "Issued quote %s: %s %s -> %s %s",
            quote.id, quote.send_amount, quote.send_currency, quote.receive_amount, quote.receive_currency,
        )
        return quote

    def create_transfer(
        self,
        user_id,
        recipient_id,
        send_amount,
        receive_currency: str,
        payment_method: str,
        quote_id=None,
        notes: Optional[str] = None,
    ) -> Transfer:
        """
        Commit a transfer.

        The transfer is bound to a quote the caller obtained beforehand. The
        stored quote is consumed; a missing, unknown, expired or already used
        quote is rejected with QuoteExpired.
        """
        if quote_id is None:
            raise QuoteExpired("A quote is required; request a quote first")

        recipient = self.directory.get(recipient_id, user_id)

        quote = self.quote_store.take(quote_id)
        if quote is None:
            raise QuoteExpired("Quote expired or already used; request a new quote")

        return self.ledger.create(
            user_id=user_id,
            recipient=recipient,
            send_amount=send_amount,
            receive_currency=receive_currency,
            payment_method=payment_method,
            quote=quote,
            notes=notes,
        )

    def list_transfers(
        self,
        user_id,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        recipient_id=None,
    ) -> TransferPageDTO:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        transfers, total_count = self.ledger.transfers.list_for_user(
            user_id,
            status=status,
            recipient_id=recipient_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return TransferPageDTO(
            transfers=transfers,
            pagination=PaginationDTO(page=page, limit=limit, total_count=total_count),
        )

    def get_transfer(self, transfer_id, user_id) -> TransferDetailDTO:
        transfer = self.ledger.transfers.get_for_user(transfer_id, user_id)
        if transfer is None:
            raise TransferNotFound("Transfer not found")
        return TransferDetailDTO(transfer=transfer, status_history=self.ledger.get_history(transfer.id))

    def track_transfer(self, reference_number: str) -> TrackingView:
        return self.ledger.track(reference_number)

    def cancel_transfer(self, transfer_id, user_id) -> Transfer:
        transfer = self.ledger.cancel(transfer_id, user_id)
        logger.info("Transfer %s cancelled by user %s", transfer.reference_number, user_id)
        return transfer
