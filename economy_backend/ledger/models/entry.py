# ledger/models/entry.py

"""
======================================================
PATH: ledger/models/entry.py
======================================================
LEDGER ENTRY MODEL

One debit OR credit line against a logical account string.

Guarantees:
- Immutable once created (no updates, no deletes)
- Integer minor units only (coins, diamonds, USD cents)
- Exactly one of debit / credit is non-zero (DB check constraint)
- Account balance = sum(credit) - sum(debit)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from ledger.models.transaction import LedgerTransaction

COIN = "COIN"
DIAMOND = "DIAMOND"
USD = "USD"

CURRENCIES = (COIN, DIAMOND, USD)


class LedgerEntry(models.Model):
    CURRENCY_CHOICES = [
        (COIN, "Coin"),
        (DIAMOND, "Diamond"),
        (USD, "USD (cents)"),
    ]

    transaction = models.ForeignKey(
        LedgerTransaction,
        on_delete=models.PROTECT,
        related_name="entries",
    )

    account = models.CharField(max_length=191, db_index=True)

    user_id = models.CharField(max_length=64, blank=True, null=True, db_index=True)

    currency = models.CharField(max_length=8, choices=CURRENCY_CHOICES, default=COIN)

    debit = models.BigIntegerField(default=0)
    credit = models.BigIntegerField(default=0)

    reference_type = models.CharField(max_length=64, blank=True, null=True)
    reference_id = models.CharField(max_length=191, blank=True, null=True)

    metadata = models.JSONField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["account", "currency"], name="ledger_entry_account_cur_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="ledger_entry_reference_idx"),
            models.Index(fields=["created_at"], name="ledger_entry_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="ledger_entry_amounts_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0)) | (Q(debit=0) & Q(credit__gt=0)),
                name="ledger_entry_one_side_only",
            ),
        ]

    def __str__(self):
        side = f"DR {self.debit}" if self.debit else f"CR {self.credit}"
        return f"{side} {self.currency} → {self.account}"

    @property
    def signed_amount(self) -> int:
        return int(self.credit) - int(self.debit)

    def clean(self):
        if not (self.account or "").strip():
            raise ValidationError("Ledger entry account is required")

        if self.currency not in CURRENCIES:
            raise ValidationError(f"Invalid currency: {self.currency!r}")

        if self.debit < 0 or self.credit < 0:
            raise ValidationError("Debit or credit cannot be negative")

        if (self.debit > 0) == (self.credit > 0):
            raise ValidationError("Exactly one of debit or credit must be non-zero")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
