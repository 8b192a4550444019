"""
Composition root for the transfer services.
The ledger is built once per process so every request shares its record locks.
"""

from functools import lru_cache

from apps.exchange.application.factory import get_quote_service, get_quote_store
from apps.transfers.application.config import TransferConfig
from apps.transfers.application.services import TransferService
from apps.transfers.domain.services import TransferLedger
from apps.transfers.infrastructure.directory import OrmRecipientDirectory
from apps.transfers.infrastructure.persistence.repositories import TransferRepository


@lru_cache(maxsize=None)
def get_transfer_ledger() -> TransferLedger:
    return TransferLedger(TransferRepository(), TransferConfig.from_settings())


@lru_cache(maxsize=None)
def get_transfer_service() -> TransferService:
    return TransferService(
        ledger=get_transfer_ledger(),
        quotes=get_quote_service(),
        quote_store=get_quote_store(),
        directory=OrmRecipientDirectory(),
    )


def reset_services() -> None:
    get_transfer_service.cache_clear()
    get_transfer_ledger.cache_clear()
