# gifting/models/gift_transaction.py

"""
GIFT TRANSACTION (RECEIPT)

Denormalised, NOT authoritative: the ledger transaction referenced by
ledger_transaction_id is the source of truth. A missing receipt never means
the gift did not happen.
"""

from __future__ import annotations

from django.db import models

from gifting.models.gift import Gift


class GiftTransaction(models.Model):
    gift = models.ForeignKey(Gift, on_delete=models.PROTECT, related_name="transactions")

    sender_id = models.CharField(max_length=64, db_index=True)
    creator_id = models.CharField(max_length=64, db_index=True)
    story_id = models.CharField(max_length=64, blank=True, null=True)

    quantity = models.PositiveIntegerField()
    coins_spent = models.BigIntegerField()
    diamonds_earned = models.BigIntegerField()
    platform_fee_ppm = models.PositiveIntegerField()

    ledger_transaction_id = models.UUIDField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.sender_id} → {self.creator_id}: {self.quantity} × {self.gift_id}"
