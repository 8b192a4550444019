"""
Django ORM models for persistence.
Infrastructure layer: technical storage detail.
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.transfers.domain.models import DeliveryMethod, PaymentMethod, TransferStatus


class BaseModel(models.Model):
    """Timestamps are set explicitly from the service clock."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True


class KycStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    VERIFIED = "verified", "Verified"
    REJECTED = "rejected", "Rejected"


class CustomerProfile(BaseModel):
    """Identity data read by the transfer flow; verification happens elsewhere."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        related_name="customer_profile",
        on_delete=models.CASCADE,
    )
    kyc_status = models.CharField(max_length=20, choices=KycStatus.choices, default=KycStatus.PENDING)
    kyc_verified_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.user} ({self.kyc_status})"

    @property
    def is_kyc_verified(self) -> bool:
        return self.kyc_status == KycStatus.VERIFIED


class Recipient(BaseModel):

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="recipients",
        on_delete=models.PROTECT,
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=3, help_text="ISO 3166-1 alpha-3 code")
    country_currency = models.CharField(max_length=3)
    delivery_method = models.CharField(max_length=20, choices=DeliveryMethod.choices())
    bank_name = models.CharField(max_length=255, blank=True)
    bank_account_number = models.CharField(max_length=50, blank=True)
    mobile_wallet_number = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.country})"


class Transfer(BaseModel):

    reference_number = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="transfers",
        on_delete=models.PROTECT,
    )
    recipient = models.ForeignKey(
        Recipient,
        related_name="transfers",
        on_delete=models.PROTECT,
    )
    send_amount = models.DecimalField(max_digits=12, decimal_places=2)
    send_currency = models.CharField(max_length=3, default="USD")
    receive_amount = models.DecimalField(max_digits=18, decimal_places=2)
    receive_currency = models.CharField(max_length=3)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6)
    fee_amount = models.DecimalField(max_digits=10, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_method = models.CharField(max_length=20, choices=DeliveryMethod.choices())
    status = models.CharField(
        max_length=20,
        choices=TransferStatus.choices(),
        default=TransferStatus.PENDING.value,
        db_index=True,
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices())
    estimated_delivery = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"], name="transfer_user_status_idx"),
        ]

    def __str__(self):
        return f"{self.reference_number} | {self.send_amount} {self.send_currency} | {self.status}"

    @property
    def transfer_status(self) -> TransferStatus:
        return TransferStatus(self.status)


class TransferStatusHistory(models.Model):
    """Append-only status log. `sequence` orders the entries of one transfer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transfer = models.ForeignKey(
        Transfer,
        related_name="status_history",
        on_delete=models.PROTECT,
    )
    sequence = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=TransferStatus.choices())
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = "transfer status history"
        ordering = ["transfer", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["transfer", "sequence"],
                name="unique_history_sequence",
            )
        ]

    def __str__(self):
        return f"{self.transfer_id} #{self.sequence} {self.status}"
