import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CustomerProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("kyc_status", models.CharField(
                    choices=[("pending", "Pending"), ("verified", "Verified"), ("rejected", "Rejected")],
                    default="pending",
                    max_length=20,
                )),
                ("kyc_verified_at", models.DateTimeField(blank=True, null=True)),
                ("user", models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="customer_profile",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Recipient",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("country", models.CharField(help_text="ISO 3166-1 alpha-3 code", max_length=3)),
                ("country_currency", models.CharField(max_length=3)),
                ("delivery_method", models.CharField(
                    choices=[
                        ("bank_deposit", "Bank Deposit"),
                        ("mobile_wallet", "Mobile Wallet"),
                        ("cash_pickup", "Cash Pickup"),
                    ],
                    max_length=20,
                )),
                ("bank_name", models.CharField(blank=True, max_length=255)),
                ("bank_account_number", models.CharField(blank=True, max_length=50)),
                ("mobile_wallet_number", models.CharField(blank=True, max_length=50)),
                ("is_active", models.BooleanField(default=True)),
                ("owner", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="recipients",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["last_name", "first_name"],
            },
        ),
        migrations.CreateModel(
            name="Transfer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reference_number", models.CharField(editable=False, max_length=20, unique=True)),
                ("send_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("send_currency", models.CharField(default="USD", max_length=3)),
                ("receive_amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("receive_currency", models.CharField(max_length=3)),
                ("exchange_rate", models.DecimalField(decimal_places=6, max_digits=18)),
                ("fee_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("delivery_method", models.CharField(
                    choices=[
                        ("bank_deposit", "Bank Deposit"),
                        ("mobile_wallet", "Mobile Wallet"),
                        ("cash_pickup", "Cash Pickup"),
                    ],
                    max_length=20,
                )),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("processing", "Processing"),
                        ("completed", "Completed"),
                        ("failed", "Failed"),
                        ("cancelled", "Cancelled"),
                        ("refunded", "Refunded"),
                    ],
                    db_index=True,
                    default="pending",
                    max_length=20,
                )),
                ("payment_method", models.CharField(
                    choices=[("card", "Card"), ("bank_transfer", "Bank Transfer"), ("debit", "Debit")],
                    max_length=20,
                )),
                ("estimated_delivery", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("failure_reason", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("recipient", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transfers",
                    to="transfers.recipient",
                )),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transfers",
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "status"], name="transfer_user_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="TransferStatusHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sequence", models.PositiveIntegerField()),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("processing", "Processing"),
                        ("completed", "Completed"),
                        ("failed", "Failed"),
                        ("cancelled", "Cancelled"),
                        ("refunded", "Refunded"),
                    ],
                    max_length=20,
                )),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("transfer", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="status_history",
                    to="transfers.transfer",
                )),
            ],
            options={
                "verbose_name_plural": "transfer status history",
                "ordering": ["transfer", "sequence"],
                "constraints": [
                    models.UniqueConstraint(fields=("transfer", "sequence"), name="unique_history_sequence"),
                ],
            },
        ),
    ]
