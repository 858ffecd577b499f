# wallets/models/wallet.py

"""
======================================================
PATH: wallets/models/wallet.py
======================================================
WALLET MODEL

One row per user, created lazily on first read.

Guarantees:
- coin_balance is never negative (DB check constraint)
- coin_balance is only changed by a compare-and-swap UPDATE in WalletStore;
  never call save() to move money
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q


class Wallet(models.Model):
    user_id = models.CharField(max_length=64, unique=True)

    coin_balance = models.BigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user_id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(coin_balance__gte=0),
                name="wallet_coin_balance_non_negative",
            )
        ]

    def __str__(self):
        return f"Wallet {self.user_id}: {self.coin_balance} coins"
