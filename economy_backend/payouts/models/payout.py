# payouts/models/payout.py

"""
======================================================
PATH: payouts/models/payout.py
======================================================
PAYOUT MODEL

Lifecycle:
    pending_review -> processing -> paid
                                 -> failed

Guarantees:
- amount is fiat minor units (USD cents), diamonds is what was redeemed
- Created in the same DB transaction as its ledger redemption entries
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q


class Payout(models.Model):
    STATUS_PENDING_REVIEW = "pending_review"
    STATUS_PROCESSING = "processing"
    STATUS_PAID = "paid"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING_REVIEW, "Pending review"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_PAID, "Paid"),
        (STATUS_FAILED, "Failed"),
    ]

    ALLOWED_TRANSITIONS = {
        STATUS_PENDING_REVIEW: {STATUS_PROCESSING, STATUS_FAILED},
        STATUS_PROCESSING: {STATUS_PAID, STATUS_FAILED},
        STATUS_PAID: set(),
        STATUS_FAILED: set(),
    }

    PROVIDER_STRIPE = "stripe"

    creator_id = models.CharField(max_length=64, db_index=True)
    provider = models.CharField(max_length=32, default=PROVIDER_STRIPE)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING_REVIEW,
        db_index=True,
    )

    amount = models.BigIntegerField(help_text="Fiat minor units (cents)")
    currency = models.CharField(max_length=3, default="USD")
    diamonds = models.BigIntegerField()

    provider_payout_id = models.CharField(max_length=191, blank=True, null=True)
    ledger_transaction_id = models.UUIDField(blank=True, null=True)
    failure_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["creator_id", "created_at"], name="payout_creator_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0) & Q(diamonds__gt=0),
                name="payout_amounts_positive",
            ),
            models.UniqueConstraint(
                fields=["provider", "provider_payout_id"],
                condition=Q(provider_payout_id__isnull=False),
                name="uniq_payout_provider_payout_id",
            ),
        ]

    def __str__(self):
        return f"Payout #{self.pk} {self.creator_id} {self.amount} {self.currency} ({self.status})"

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, set())
