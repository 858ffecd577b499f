"""
======================================================
PATH: payments/migrations/0001_initial.py
======================================================
MIGRATION: CREATE CoinPurchase

- (provider, provider_payment_id) unique: a payment credits coins once
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CoinPurchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=64, db_index=True)),
                ("provider", models.CharField(max_length=32, default="stripe")),
                ("provider_payment_id", models.CharField(max_length=191)),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[("succeeded", "Succeeded"), ("refunded", "Refunded")],
                        default="succeeded",
                    ),
                ),
                ("amount", models.BigIntegerField(help_text="Amount received, fiat minor units")),
                ("currency", models.CharField(max_length=3, default="USD")),
                ("coins_credited", models.BigIntegerField(default=0)),
                ("refunded_coins", models.BigIntegerField(default=0)),
                ("refunded_amount", models.BigIntegerField(default=0, help_text="Cumulative cents refunded")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["provider", "provider_payment_id"],
                        name="uniq_coin_purchase_provider_payment",
                    ),
                ],
            },
        ),
    ]
