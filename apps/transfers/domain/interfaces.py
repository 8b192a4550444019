from abc import ABC, abstractmethod

from apps.transfers.domain.models import RecipientInfo


class BaseRecipientDirectory(ABC):
    @abstractmethod
    def get(self, recipient_id, owner_user_id) -> RecipientInfo:
        """Return the active recipient owned by owner_user_id or raise RecipientNotFound."""
        pass
