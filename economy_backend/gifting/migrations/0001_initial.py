"""
======================================================
PATH: gifting/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Gift + GiftTransaction
"""

from __future__ import annotations

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Gift",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(max_length=64, unique=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "price_coins",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("diamond_value", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True, db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["price_coins", "code"],
            },
        ),
        migrations.CreateModel(
            name="GiftTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sender_id", models.CharField(max_length=64, db_index=True)),
                ("creator_id", models.CharField(max_length=64, db_index=True)),
                ("story_id", models.CharField(max_length=64, blank=True, null=True)),
                ("quantity", models.PositiveIntegerField()),
                ("coins_spent", models.BigIntegerField()),
                ("diamonds_earned", models.BigIntegerField()),
                ("platform_fee_ppm", models.PositiveIntegerField()),
                ("ledger_transaction_id", models.UUIDField(db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "gift",
                    models.ForeignKey(
                        to="gifting.gift",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
