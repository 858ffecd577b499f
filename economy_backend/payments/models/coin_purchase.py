# payments/models/coin_purchase.py

"""
COIN PURCHASE MODEL

One row per processor payment. The (provider, provider_payment_id) pair is
unique, so a replayed "payment succeeded" event can never credit twice.
"""

from __future__ import annotations

from django.db import models


class CoinPurchase(models.Model):
    STATUS_SUCCEEDED = "succeeded"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_SUCCEEDED, "Succeeded"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    user_id = models.CharField(max_length=64, db_index=True)
    provider = models.CharField(max_length=32, default="stripe")
    provider_payment_id = models.CharField(max_length=191)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUCCEEDED)

    amount = models.BigIntegerField(help_text="Amount received, fiat minor units")
    currency = models.CharField(max_length=3, default="USD")

    coins_credited = models.BigIntegerField(default=0)
    refunded_coins = models.BigIntegerField(default=0)
    refunded_amount = models.BigIntegerField(default=0, help_text="Cumulative cents refunded")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "provider_payment_id"],
                name="uniq_coin_purchase_provider_payment",
            )
        ]

    def __str__(self):
        return f"{self.provider}:{self.provider_payment_id} → {self.user_id} ({self.coins_credited} coins)"
