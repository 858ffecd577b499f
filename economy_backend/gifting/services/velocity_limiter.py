# gifting/services/velocity_limiter.py

"""
VELOCITY LIMITER (GIFT SPAM / LAUNDERING GUARD)

Two fixed buckets per sender on the shared counter cache:
- gift:ps:{sender}:{epoch_second}   expiry 2s      ceiling VELOCITY_PER_SECOND_LIMIT
- gift:ph:{sender}:{epoch_hour}     expiry 3660s   ceiling VELOCITY_PER_HOUR_LIMIT

Both counters are incremented by the spend, THEN checked. Over either
ceiling -> VELOCITY_LIMIT_EXCEEDED before any wallet or ledger mutation.

Counter increments are not rolled back when a later step fails; a wasted
increment is accepted.

Fails CLOSED: any counter-service error raises VelocityServiceError and the
gift is refused.
"""

from __future__ import annotations

import logging
import time

from gifting.services.exceptions import (
    VelocityLimitExceededError,
    VelocityServiceError,
)
from wallets.services.exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

PER_SECOND_TTL = 2
PER_HOUR_TTL = 3600 + 60


class VelocityLimiter:
    def __init__(self, *, cache, per_second_limit: int, per_hour_limit: int, clock=time.time):
        self.cache = cache
        self.per_second_limit = int(per_second_limit)
        self.per_hour_limit = int(per_hour_limit)
        self.clock = clock

    @staticmethod
    def keys_for(sender_id, now: int) -> tuple[str, str]:
        return (
            f"gift:ps:{sender_id}:{now}",
            f"gift:ph:{sender_id}:{now // 3600}",
        )

    def _incr(self, key: str, amount: int, ttl: int) -> int:
        self.cache.add(key, 0, timeout=ttl)
        try:
            return int(self.cache.incr(key, amount))
        except ValueError:
            # Expired between add() and incr(): start a fresh bucket once
            self.cache.add(key, 0, timeout=ttl)
            return int(self.cache.incr(key, amount))

    def check_and_consume(self, sender_id, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(f"Velocity amount must be a positive integer, got {amount!r}")

        now = int(self.clock())
        per_second_key, per_hour_key = self.keys_for(sender_id, now)

        try:
            per_second = self._incr(per_second_key, amount, PER_SECOND_TTL)
            per_hour = self._incr(per_hour_key, amount, PER_HOUR_TTL)
        except Exception as exc:
            logger.exception(
                "velocity counter service unavailable; refusing spend",
                extra={"sender_id": sender_id, "amount": amount},
            )
            raise VelocityServiceError("Velocity counter service unavailable") from exc

        if per_second > self.per_second_limit:
            logger.warning(
                "velocity limit exceeded (per-second)",
                extra={"sender_id": sender_id, "total": per_second},
            )
            raise VelocityLimitExceededError(
                "Velocity limit exceeded (per-second)",
                sender_id=sender_id,
                window="second",
            )

        if per_hour > self.per_hour_limit:
            logger.warning(
                "velocity limit exceeded (per-hour)",
                extra={"sender_id": sender_id, "total": per_hour},
            )
            raise VelocityLimitExceededError(
                "Velocity limit exceeded (per-hour)",
                sender_id=sender_id,
                window="hour",
            )
