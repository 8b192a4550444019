# ORM models live in the infrastructure layer; Django discovers them here.
from apps.transfers.infrastructure.persistence.models import (  # noqa: F401
    CustomerProfile,
    KycStatus,
    Recipient,
    Transfer,
    TransferStatusHistory,
)
