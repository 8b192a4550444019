"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from django.db.models import Max

from apps.transfers.infrastructure.persistence.models import (
    Recipient,
    Transfer,
    TransferStatusHistory,
)


def parse_id(value) -> Optional[uuid.UUID]:
    """Return the UUID, or None when the value is not one."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class TransferRepository:
    """Repository for the Transfer aggregate and its status history."""

    @staticmethod
    def create(**fields) -> Transfer:
        """Insert a new transfer. Raises IntegrityError on a duplicate reference number."""
        return Transfer.objects.create(**fields)

    @staticmethod
    def reference_exists(reference_number: str) -> bool:
        return Transfer.objects.filter(reference_number=reference_number).exists()

    @staticmethod
    def get_for_update(transfer_id) -> Optional[Transfer]:
        """Get a transfer and lock its row until the surrounding transaction ends."""
        transfer_id = parse_id(transfer_id)
        if transfer_id is None:
            return None
        return Transfer.objects.select_for_update().filter(pk=transfer_id).first()

    @staticmethod
    def get_for_user(transfer_id, user_id) -> Optional[Transfer]:
        transfer_id = parse_id(transfer_id)
        if transfer_id is None:
            return None
        return (
            Transfer.objects
            .select_related("recipient")
            .filter(pk=transfer_id, user_id=user_id)
            .first()
        )

    @staticmethod
    def get_by_reference(reference_number: str) -> Optional[Transfer]:
        return (
            Transfer.objects
            .select_related("recipient")
            .filter(reference_number=reference_number)
            .first()
        )

    @staticmethod
    def save_status(transfer: Transfer) -> Transfer:
        transfer.save(update_fields=["status", "completed_at", "failure_reason", "updated_at"])
        return transfer

    @staticmethod
    def append_history(
        transfer: Transfer,
        status: str,
        notes: Optional[str],
        created_at: datetime
    ) -> TransferStatusHistory:
        """Append the next entry of the transfer's status history."""
        last = (
            TransferStatusHistory.objects
            .filter(transfer=transfer)
            .aggregate(last=Max("sequence"))["last"]
        )
        return TransferStatusHistory.objects.create(
            transfer=transfer,
            sequence=(last or 0) + 1,
            status=status,
            notes=notes,
            created_at=created_at,
        )

    @staticmethod
    def get_history(transfer_id) -> List[TransferStatusHistory]:
        return list(
            TransferStatusHistory.objects
            .filter(transfer_id=transfer_id)
            .order_by("sequence")
        )

    @staticmethod
    def list_for_user(
        user_id,
        status: Optional[str] = None,
        recipient_id=None,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Transfer], int]:
        """Page through a user's transfers, newest first. Returns (page, total count)."""
        queryset = Transfer.objects.filter(user_id=user_id)
        if status:
            queryset = queryset.filter(status=status)
        if recipient_id:
            queryset = queryset.filter(recipient_id=recipient_id)

        total_count = queryset.count()
        page = list(
            queryset
            .select_related("recipient")
            .order_by("-created_at", "-reference_number")[offset:offset + limit]
        )
        return page, total_count


class RecipientRepository:
    """Repository for Recipient rows."""

    @staticmethod
    def get_active_for_owner(recipient_id, owner_id) -> Optional[Recipient]:
        return Recipient.objects.filter(pk=recipient_id, owner_id=owner_id, is_active=True).first()
