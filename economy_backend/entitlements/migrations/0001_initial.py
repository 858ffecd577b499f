"""
======================================================
PATH: entitlements/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Entitlement
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Entitlement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=64, db_index=True)),
                ("story_id", models.CharField(max_length=64)),
                ("entitlement_type", models.CharField(max_length=32, default="premium_unlock")),
                (
                    "source",
                    models.CharField(
                        max_length=32,
                        choices=[
                            ("coins", "Coins"),
                            ("grant", "Manual grant"),
                            ("subscription", "Subscription"),
                        ],
                        default="grant",
                    ),
                ),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["user_id", "story_id", "entitlement_type"],
                        name="uniq_entitlement_user_story_type",
                    ),
                ],
            },
        ),
    ]
