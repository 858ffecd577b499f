# payouts/models/creator_account.py

from __future__ import annotations

from django.db import models


class CreatorAccount(models.Model):
    """
    Creator's connected account at the payout processor.

    Only the opaque account id and readiness flags are stored here; KYC and
    onboarding live entirely at the processor.
    """

    user_id = models.CharField(max_length=64, unique=True)
    provider = models.CharField(max_length=32, default="stripe")
    provider_account_id = models.CharField(max_length=191, unique=True)

    details_submitted = models.BooleanField(default=False)
    payouts_enabled = models.BooleanField(default=False)
    requirements_due = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user_id"]

    def __str__(self):
        return f"{self.user_id} → {self.provider}:{self.provider_account_id}"
