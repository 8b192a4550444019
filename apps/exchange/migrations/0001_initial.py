import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CurrencyExchangeRate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("base_currency", models.CharField(max_length=3)),
                ("target_currency", models.CharField(max_length=3)),
                ("rate", models.DecimalField(decimal_places=6, max_digits=18)),
                ("fetched_at", models.DateTimeField(db_index=True)),
            ],
            options={
                "ordering": ["base_currency", "target_currency"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("base_currency", "target_currency"),
                        name="unique_rate_per_pair",
                    )
                ],
            },
        ),
    ]
