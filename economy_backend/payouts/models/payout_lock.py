# payouts/models/payout_lock.py

from __future__ import annotations

from django.db import models


class PayoutRequestLock(models.Model):
    """
    One row per creator, locked (SELECT ... FOR UPDATE) while a payout
    request is being written. Serializes payout requests per creator.
    """

    creator_id = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"payout lock {self.creator_id}"
