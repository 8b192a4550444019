"""
Data Transfer Objects for the transfers application layer.
"""

from dataclasses import dataclass, field
from typing import List

from apps.transfers.infrastructure.persistence.models import Transfer, TransferStatusHistory


@dataclass
class PaginationDTO:
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.limit)

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total_count


@dataclass
class TransferPageDTO:
    """One page of a user's transfers, newest first."""
    transfers: List[Transfer]
    pagination: PaginationDTO


@dataclass
class TransferDetailDTO:
    transfer: Transfer
    status_history: List[TransferStatusHistory] = field(default_factory=list)
