# ledger/models/conversion_rate.py

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class ConversionRate(models.Model):
    """
    Exchange rate between two internal units.

    Rows used by the economy:
    - COIN -> DIAMOND   (e.g. 0.5 diamonds per coin)
    - DIAMOND -> USD    (e.g. 0.005 USD per diamond; converted to cents by callers)
    """

    from_unit = models.CharField(max_length=8)
    to_unit = models.CharField(max_length=8)

    rate = models.DecimalField(
        max_digits=20,
        decimal_places=10,
        validators=[MinValueValidator(Decimal("0"))],
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["from_unit", "to_unit"]
        constraints = [
            models.UniqueConstraint(
                fields=["from_unit", "to_unit"],
                name="uniq_conversion_rate_pair",
            )
        ]

    def __str__(self):
        return f"1 {self.from_unit} = {self.rate} {self.to_unit}"
