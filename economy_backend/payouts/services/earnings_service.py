# payouts/services/earnings_service.py

"""
======================================================
PATH: payouts/services/earnings_service.py
======================================================
EARNINGS & PAYOUT REQUEST SERVICE

get_summary():
- diamonds = credits - debits on creator_earnings:{creator} (DIAMOND), floored at 0
- est_usd_cents via the conversion table
- payout history

request_payout():
- Recompute the balance (and the highest entry id it came from)
- NO_EARNINGS when balance <= 0, BELOW_MINIMUM under PAYOUT_MINIMUM_CENTS
- ONE database transaction:
    * Payout(pending_review)
    * ledger redemption:
        DIAMOND  debit  creator_earnings:{creator}        (full balance)
                 credit platform_diamond_redemptions
        USD      debit  platform_payout_expense
                 credit creator_payout_payable:{creator}  (cents)
- Double-payout guard:
    * requests for one creator are serialized on a PayoutRequestLock row
      (SELECT ... FOR UPDATE) and the balance is re-read under the lock;
      a request whose balance moved fails with CONCURRENT_UPDATE_FAILED
    * the ledger idempotency key payout:{creator}:{watermark} rejects a
      second write computed from the same read
    * either way the loser's Payout row rolls back with it
"""

from __future__ import annotations

import logging

from django.db import transaction

from ledger.models.entry import DIAMOND, USD
from ledger.services import accounts
from ledger.services.balance_service import (
    get_account_balance,
    get_account_balance_with_watermark,
)
from ledger.services.exceptions import LedgerIdempotencyError
from payouts.models.payout import Payout
from payouts.models.payout_lock import PayoutRequestLock
from payouts.services.exceptions import (
    BelowMinimumError,
    ConcurrentUpdateError,
    NoEarningsError,
)

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_CENTS = 100


class EarningsService:
    def __init__(self, *, ledger, rates, minimum_cents: int = DEFAULT_MINIMUM_CENTS):
        self.ledger = ledger
        self.rates = rates
        self.minimum_cents = int(minimum_cents)

    def diamonds_balance(self, creator_id) -> int:
        balance = get_account_balance(accounts.creator_earnings(creator_id), currency=DIAMOND)
        return max(balance, 0)

    def get_summary(self, creator_id) -> dict:
        diamonds = self.diamonds_balance(creator_id)
        payouts = list(
            Payout.objects.filter(creator_id=str(creator_id))
            .order_by("-created_at")
            .values("id", "status", "amount", "currency", "diamonds", "created_at")
        )
        return {
            "diamonds_balance": diamonds,
            "est_usd_cents": self.rates.diamonds_to_usd_cents(diamonds),
            "payouts": payouts,
        }

    def request_payout(self, creator_id) -> int:
        creator_id = str(creator_id)
        earnings_account = accounts.creator_earnings(creator_id)

        diamonds, watermark = get_account_balance_with_watermark(
            earnings_account, currency=DIAMOND
        )
        if diamonds <= 0:
            raise NoEarningsError("No earnings available for payout", creator_id=creator_id)

        cents = self.rates.diamonds_to_usd_cents(diamonds)
        if cents < self.minimum_cents:
            raise BelowMinimumError(
                f"Minimum payout is {self.minimum_cents} cents",
                creator_id=creator_id,
                cents=cents,
            )

        PayoutRequestLock.objects.get_or_create(creator_id=creator_id)

        ref = {"reference_type": "payout"}
        try:
            with transaction.atomic():
                PayoutRequestLock.objects.select_for_update().get(creator_id=creator_id)

                # earnings may have moved since the read above
                current = get_account_balance(earnings_account, currency=DIAMOND)
                if current != diamonds:
                    logger.warning(
                        "payout request computed from a stale balance",
                        extra={"creator_id": creator_id, "requested": diamonds, "current": current},
                    )
                    raise ConcurrentUpdateError(
                        "Earnings changed while the payout was being requested",
                        creator_id=creator_id,
                    )

                payout = Payout.objects.create(
                    creator_id=creator_id,
                    provider=Payout.PROVIDER_STRIPE,
                    status=Payout.STATUS_PENDING_REVIEW,
                    amount=cents,
                    currency=USD,
                    diamonds=diamonds,
                )
                ref["reference_id"] = str(payout.pk)

                tx_id = self.ledger.record(
                    [
                        {"account": earnings_account, "user_id": creator_id, "debit": diamonds, "currency": DIAMOND, **ref},
                        {"account": accounts.PLATFORM_DIAMOND_REDEMPTIONS, "credit": diamonds, "currency": DIAMOND, **ref},
                        {"account": accounts.PLATFORM_PAYOUT_EXPENSE, "debit": cents, "currency": USD, **ref},
                        {
                            "account": accounts.creator_payout_payable(creator_id),
                            "user_id": creator_id,
                            "credit": cents,
                            "currency": USD,
                            **ref,
                        },
                    ],
                    description=f"Payout request #{payout.pk}",
                    idempotency_key=f"payout:{creator_id}:{watermark}",
                )

                Payout.objects.filter(pk=payout.pk).update(ledger_transaction_id=tx_id)
        except LedgerIdempotencyError as exc:
            logger.warning(
                "concurrent payout request rejected",
                extra={"creator_id": creator_id, "watermark": watermark},
            )
            raise ConcurrentUpdateError(
                "A payout for these earnings is already being processed",
                creator_id=creator_id,
            ) from exc

        logger.info(
            "payout requested",
            extra={
                "creator_id": creator_id,
                "payout_id": payout.pk,
                "diamonds": diamonds,
                "cents": cents,
                "ledger_transaction_id": tx_id,
            },
        )
        return payout.pk
