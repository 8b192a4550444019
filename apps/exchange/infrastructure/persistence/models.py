"""
Django ORM models for persistence.
Infrastructure layer: technical storage detail.
"""

import uuid
from django.db import models


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CurrencyExchangeRate(BaseModel):
    """Cached rate for a currency pair. One row per pair, overwritten on refresh."""

    base_currency = models.CharField(max_length=3)
    target_currency = models.CharField(max_length=3)
    rate = models.DecimalField(
        decimal_places=6,
        max_digits=18,
    )
    fetched_at = models.DateTimeField(db_index=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["base_currency", "target_currency"],
                name="unique_rate_per_pair",
            ),
        ]
        ordering = ["base_currency", "target_currency"]

    def __str__(self):
        return f"{self.base_currency}/{self.target_currency} | {self.rate} | {self.fetched_at:%Y-%m-%d %H:%M}"
