# ledger/services/conversion_service.py

"""
CONVERSION RATE TABLE

Authoritative unit conversions for the economy:
- coins    -> diamonds   floor(coins * rate)
- diamonds -> USD cents  floor(diamonds * rate * 100)

Rules:
- Decimal arithmetic only (no float drift)
- Floor rounding: the platform never over-credits
- Rates are cached per instance for ttl_seconds (0 = no expiry);
  clear_cache() forces a reload after edits
"""

from __future__ import annotations

import logging
import time
from decimal import ROUND_FLOOR, Decimal

from ledger.models.conversion_rate import ConversionRate
from ledger.models.entry import COIN, DIAMOND, USD
from ledger.services.exceptions import InvalidAmountError, RateNotFoundError

logger = logging.getLogger(__name__)

CENTS_PER_DOLLAR = Decimal("100")


def _non_negative_int(value, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{field} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidAmountError(f"{field} cannot be negative")
    return value


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


class ConversionRateTable:
    def __init__(self, *, ttl_seconds: float = 0, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: dict[tuple[str, str], tuple[Decimal, float]] = {}

    def rate(self, from_unit: str, to_unit: str) -> Decimal:
        key = (from_unit, to_unit)
        cached = self._cache.get(key)
        if cached is not None:
            value, loaded_at = cached
            if not self.ttl_seconds or self._clock() - loaded_at < self.ttl_seconds:
                return value

        row = (
            ConversionRate.objects.filter(from_unit=from_unit, to_unit=to_unit)
            .only("rate")
            .first()
        )
        if row is None:
            logger.error(
                "conversion rate missing",
                extra={"from_unit": from_unit, "to_unit": to_unit},
            )
            raise RateNotFoundError(
                f"No conversion rate configured for {from_unit} -> {to_unit}"
            )

        value = Decimal(row.rate)
        self._cache[key] = (value, self._clock())
        return value

    def clear_cache(self) -> None:
        self._cache.clear()

    def coins_to_diamonds(self, coins: int) -> int:
        coins = _non_negative_int(coins, field="coins")
        return _floor(Decimal(coins) * self.rate(COIN, DIAMOND))

    def diamonds_to_usd_cents(self, diamonds: int) -> int:
        diamonds = _non_negative_int(diamonds, field="diamonds")
        if diamonds == 0:
            return 0
        return _floor(Decimal(diamonds) * self.rate(DIAMOND, USD) * CENTS_PER_DOLLAR)
