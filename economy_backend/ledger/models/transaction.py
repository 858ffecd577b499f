# ledger/models/transaction.py

"""
======================================================
PATH: ledger/models/transaction.py
======================================================
LEDGER TRANSACTION MODEL

Header row grouping the entries of one balanced ledger write.

Guarantees:
- Immutable once created (no updates, no deletes)
- id is the transaction id handed back to callers
- Idempotency via idempotency_key uniqueness (when a key is provided)
"""

from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class LedgerTransaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    idempotency_key = models.CharField(
        max_length=191,
        blank=True,
        null=True,
        help_text="Caller-supplied key (payout watermark, webhook id, ...)",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="ledger_tx_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["idempotency_key"],
                condition=Q(idempotency_key__isnull=False) & ~Q(idempotency_key=""),
                name="uniq_ledger_tx_idempotency_key",
            )
        ]
        verbose_name = "Ledger Transaction"
        verbose_name_plural = "Ledger Transactions"

    def __str__(self):
        return f"LedgerTransaction {self.id}"

    def save(self, *args, **kwargs):
        # UUID pk is assigned before insert, so pk alone does not mean "persisted".
        if not self._state.adding:
            raise ValidationError("LedgerTransaction records are immutable once created")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerTransaction records are immutable and cannot be deleted")
