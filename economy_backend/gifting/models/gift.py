# gifting/models/gift.py

from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models


class Gift(models.Model):
    """
    Catalogue entry (static reference data).

    - price_coins: what the sender pays per unit
    - diamond_value: diamonds minted per unit, split creator / platform
    """

    code = models.SlugField(max_length=64, unique=True)
    name = models.CharField(max_length=100)

    price_coins = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    diamond_value = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["price_coins", "code"]

    def __str__(self):
        return f"{self.name} ({self.price_coins} coins)"
