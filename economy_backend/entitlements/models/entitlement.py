# entitlements/models/entitlement.py

"""
ENTITLEMENT MODEL

Right of a user to access a piece of content (e.g. a premium story unlock).

- One row per (user_id, story_id, entitlement_type)
- expires_at NULL means "never expires"
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone


class Entitlement(models.Model):
    TYPE_PREMIUM_UNLOCK = "premium_unlock"

    SOURCE_COINS = "coins"
    SOURCE_GRANT = "grant"
    SOURCE_SUBSCRIPTION = "subscription"

    SOURCE_CHOICES = [
        (SOURCE_COINS, "Coins"),
        (SOURCE_GRANT, "Manual grant"),
        (SOURCE_SUBSCRIPTION, "Subscription"),
    ]

    user_id = models.CharField(max_length=64, db_index=True)
    story_id = models.CharField(max_length=64)
    entitlement_type = models.CharField(max_length=32, default=TYPE_PREMIUM_UNLOCK)
    source = models.CharField(max_length=32, choices=SOURCE_CHOICES, default=SOURCE_GRANT)

    expires_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "story_id", "entitlement_type"],
                name="uniq_entitlement_user_story_type",
            )
        ]

    def __str__(self):
        return f"{self.user_id} → {self.story_id} ({self.entitlement_type})"

    def is_active(self, *, now=None) -> bool:
        if self.expires_at is None:
            return True
        return self.expires_at > (now or timezone.now())
