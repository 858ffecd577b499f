"""
======================================================
PATH: wallets/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Wallet

- One row per user_id
- coin_balance guarded by a non-negative check constraint
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Wallet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=64, unique=True)),
                ("coin_balance", models.BigIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["user_id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(coin_balance__gte=0),
                        name="wallet_coin_balance_non_negative",
                    ),
                ],
            },
        ),
    ]
