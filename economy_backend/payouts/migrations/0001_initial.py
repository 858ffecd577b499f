"""
======================================================
PATH: payouts/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Payout + CreatorAccount
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CreatorAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=64, unique=True)),
                ("provider", models.CharField(max_length=32, default="stripe")),
                ("provider_account_id", models.CharField(max_length=191, unique=True)),
                ("details_submitted", models.BooleanField(default=False)),
                ("payouts_enabled", models.BooleanField(default=False)),
                ("requirements_due", models.JSONField(default=list, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["user_id"],
            },
        ),
        migrations.CreateModel(
            name="Payout",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("creator_id", models.CharField(max_length=64, db_index=True)),
                ("provider", models.CharField(max_length=32, default="stripe")),
                (
                    "status",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("pending_review", "Pending review"),
                            ("processing", "Processing"),
                            ("paid", "Paid"),
                            ("failed", "Failed"),
                        ],
                        default="pending_review",
                        db_index=True,
                    ),
                ),
                ("amount", models.BigIntegerField(help_text="Fiat minor units (cents)")),
                ("currency", models.CharField(max_length=3, default="USD")),
                ("diamonds", models.BigIntegerField()),
                ("provider_payout_id", models.CharField(max_length=191, blank=True, null=True)),
                ("ledger_transaction_id", models.UUIDField(blank=True, null=True)),
                ("failure_reason", models.CharField(max_length=255, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["creator_id", "created_at"], name="payout_creator_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0) & models.Q(diamonds__gt=0),
                        name="payout_amounts_positive",
                    ),
                    models.UniqueConstraint(
                        fields=["provider", "provider_payout_id"],
                        condition=models.Q(provider_payout_id__isnull=False),
                        name="uniq_payout_provider_payout_id",
                    ),
                ],
            },
        ),
    ]
