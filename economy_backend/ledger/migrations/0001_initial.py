"""
======================================================
PATH: ledger/migrations/0001_initial.py
======================================================
MIGRATION: CREATE LEDGER TABLES

- LedgerTransaction (UUID header, partial-unique idempotency key)
- LedgerEntry (append-only debit/credit lines, per-currency)
- ConversionRate (unit pair -> decimal rate)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LedgerTransaction",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        max_length=191,
                        blank=True,
                        null=True,
                        help_text="Caller-supplied key (payout watermark, webhook id, ...)",
                    ),
                ),
                ("description", models.CharField(max_length=255, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Ledger Transaction",
                "verbose_name_plural": "Ledger Transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["created_at"], name="ledger_tx_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["idempotency_key"],
                        condition=models.Q(idempotency_key__isnull=False)
                        & ~models.Q(idempotency_key=""),
                        name="uniq_ledger_tx_idempotency_key",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account", models.CharField(max_length=191, db_index=True)),
                ("user_id", models.CharField(max_length=64, blank=True, null=True, db_index=True)),
                (
                    "currency",
                    models.CharField(
                        max_length=8,
                        choices=[("COIN", "Coin"), ("DIAMOND", "Diamond"), ("USD", "USD (cents)")],
                        default="COIN",
                    ),
                ),
                ("debit", models.BigIntegerField(default=0)),
                ("credit", models.BigIntegerField(default=0)),
                ("reference_type", models.CharField(max_length=64, blank=True, null=True)),
                ("reference_id", models.CharField(max_length=191, blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "transaction",
                    models.ForeignKey(
                        to="ledger.ledgertransaction",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["account", "currency"], name="ledger_entry_account_cur_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="ledger_entry_reference_idx"),
                    models.Index(fields=["created_at"], name="ledger_entry_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(debit__gte=0) & models.Q(credit__gte=0),
                        name="ledger_entry_amounts_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=(models.Q(debit__gt=0) & models.Q(credit=0))
                        | (models.Q(debit=0) & models.Q(credit__gt=0)),
                        name="ledger_entry_one_side_only",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ConversionRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_unit", models.CharField(max_length=8)),
                ("to_unit", models.CharField(max_length=8)),
                (
                    "rate",
                    models.DecimalField(
                        max_digits=20,
                        decimal_places=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["from_unit", "to_unit"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["from_unit", "to_unit"],
                        name="uniq_conversion_rate_pair",
                    ),
                ],
            },
        ),
    ]
