"""
ORM-backed recipient directory.
"""

from django.core.exceptions import ValidationError

from apps.transfers.domain.exceptions import RecipientNotFound
from apps.transfers.domain.interfaces import BaseRecipientDirectory
from apps.transfers.domain.models import RecipientInfo
from apps.transfers.infrastructure.persistence.repositories import RecipientRepository


class OrmRecipientDirectory(BaseRecipientDirectory):

    def __init__(self, repository: RecipientRepository | None = None):
        self.repository = repository or RecipientRepository()

    def get(self, recipient_id, owner_user_id) -> RecipientInfo:
        try:
            recipient = self.repository.get_active_for_owner(recipient_id, owner_user_id)
        except ValidationError:
            # Malformed UUID
            recipient = None

        if recipient is None:
            raise RecipientNotFound("Recipient not found")

        return RecipientInfo(
            id=recipient.id,
            owner_user_id=recipient.owner_id,
            delivery_method=recipient.delivery_method,
            country_currency=recipient.country_currency.upper(),
            first_name=recipient.first_name,
            last_name=recipient.last_name,
            country=recipient.country,
        )
