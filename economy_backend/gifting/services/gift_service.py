# gifting/services/gift_service.py

"""
======================================================
PATH: gifting/services/gift_service.py
======================================================
GIFTING PIPELINE

send_gift():
1. Active gift by code                     (INVALID_GIFT)
2. coins = price_coins * quantity          (quantity >= 1, floored)
3. Velocity check                          (before ANY money moves)
4. Wallet debit                            (INSUFFICIENT_BALANCE aborts here)
5. Diamond split:
       platform = floor(total * ppm / 1_000_000)
       creator  = total - platform          (never computed independently)
6. One ledger transaction, balanced per currency:
       COIN     credit platform_coin_liability / debit platform_coin_redemptions
       DIAMOND  debit platform_diamond_issuance (total)
                credit creator_earnings:{creator} (creator share)
                credit platform_revenue (platform share)
   Steps 4-6 share ONE database transaction: a failed ledger write leaves
   the sender's wallet untouched.
7. GiftTransaction receipt (best-effort, after commit)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, transaction

from gifting.models.gift import Gift
from gifting.models.gift_transaction import GiftTransaction
from gifting.services.exceptions import InvalidGiftError
from ledger.models.entry import COIN, DIAMOND
from ledger.services import accounts
from wallets.services.exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

PPM_SCALE = 1_000_000
DEFAULT_PLATFORM_FEE_PPM = 200_000


@dataclass(frozen=True)
class GiftResult:
    gift_code: str
    quantity: int
    coins_spent: int
    diamonds_total: int
    creator_diamonds: int
    platform_diamonds: int
    sender_balance: int
    ledger_transaction_id: str


def split_diamonds(total: int, ppm: int) -> tuple[int, int]:
    """
    Returns (creator_share, platform_share). Always sums to total exactly.
    """
    if not 0 <= ppm <= PPM_SCALE:
        raise ValueError(f"platform fee ppm out of range: {ppm}")
    platform = (total * ppm) // PPM_SCALE
    return total - platform, platform


def _quantity(value) -> int:
    if value is None:
        return 1
    if isinstance(value, bool):
        raise InvalidAmountError("quantity must be a number")
    try:
        qty = math.floor(Decimal(str(value)))
    except (InvalidOperation, ValueError, OverflowError) as exc:
        raise InvalidAmountError(f"Invalid quantity: {value!r}") from exc
    if qty < 1:
        raise InvalidAmountError("quantity must be at least 1")
    return qty


class GiftService:
    def __init__(self, *, wallets, ledger, velocity, platform_fee_ppm: int = DEFAULT_PLATFORM_FEE_PPM):
        if not 0 <= int(platform_fee_ppm) <= PPM_SCALE:
            raise ValueError("GIFT_PLATFORM_FEE_PPM must be within [0, 1000000]")
        self.wallets = wallets
        self.ledger = ledger
        self.velocity = velocity
        self.platform_fee_ppm = int(platform_fee_ppm)

    def list_active(self):
        return Gift.objects.filter(is_active=True).order_by("price_coins", "code")

    def send_gift(
        self,
        *,
        sender_id,
        creator_id,
        gift_code: str,
        quantity=1,
        story_id=None,
    ) -> GiftResult:
        gift = Gift.objects.filter(code=gift_code, is_active=True).first()
        if gift is None:
            raise InvalidGiftError(f"Invalid gift: {gift_code!r}")

        qty = _quantity(quantity)
        coins = int(gift.price_coins) * qty

        self.velocity.check_and_consume(sender_id, coins)

        diamonds_total = int(gift.diamond_value) * qty
        creator_share, platform_share = split_diamonds(diamonds_total, self.platform_fee_ppm)

        ref = {"reference_type": "gift", "reference_id": str(gift.id)}
        metadata = {"qty": qty, "to": str(creator_id), "story_id": story_id}

        with transaction.atomic():
            debit = self.wallets.debit_coins(
                sender_id,
                coins,
                metadata=metadata,
                description=f"Gift {gift.code} ×{qty} (sender debit)",
                **ref,
            )
            tx_id = self.ledger.record(
                self._ledger_entries(
                    creator_id=creator_id,
                    coins=coins,
                    diamonds_total=diamonds_total,
                    creator_share=creator_share,
                    platform_share=platform_share,
                    ref=ref,
                ),
                description=f"Gift {gift.code} ×{qty} to {creator_id}",
            )

        logger.info(
            "gift sent",
            extra={
                "sender_id": str(sender_id),
                "creator_id": str(creator_id),
                "gift": gift.code,
                "quantity": qty,
                "coins": coins,
                "creator_diamonds": creator_share,
                "platform_diamonds": platform_share,
                "ledger_transaction_id": tx_id,
            },
        )

        self._write_receipt(
            gift=gift,
            sender_id=sender_id,
            creator_id=creator_id,
            story_id=story_id,
            quantity=qty,
            coins=coins,
            creator_share=creator_share,
            tx_id=tx_id,
        )

        return GiftResult(
            gift_code=gift.code,
            quantity=qty,
            coins_spent=coins,
            diamonds_total=diamonds_total,
            creator_diamonds=creator_share,
            platform_diamonds=platform_share,
            sender_balance=debit.balance,
            ledger_transaction_id=tx_id,
        )

    # ============================================================
    # INTERNALS
    # ============================================================

    @staticmethod
    def _ledger_entries(*, creator_id, coins, diamonds_total, creator_share, platform_share, ref) -> list[dict]:
        entries = [
            {"account": accounts.PLATFORM_COIN_LIABILITY, "credit": coins, "currency": COIN, **ref},
            {"account": accounts.PLATFORM_COIN_REDEMPTIONS, "debit": coins, "currency": COIN, **ref},
        ]

        if diamonds_total > 0:
            entries.append(
                {"account": accounts.PLATFORM_DIAMOND_ISSUANCE, "debit": diamonds_total, "currency": DIAMOND, **ref}
            )
        if creator_share > 0:
            entries.append(
                {
                    "account": accounts.creator_earnings(creator_id),
                    "user_id": str(creator_id),
                    "credit": creator_share,
                    "currency": DIAMOND,
                    **ref,
                }
            )
        if platform_share > 0:
            entries.append(
                {"account": accounts.PLATFORM_REVENUE, "credit": platform_share, "currency": DIAMOND, **ref}
            )
        return entries

    def _write_receipt(self, *, gift, sender_id, creator_id, story_id, quantity, coins, creator_share, tx_id) -> None:
        try:
            with transaction.atomic():
                GiftTransaction.objects.create(
                    gift=gift,
                    sender_id=str(sender_id),
                    creator_id=str(creator_id),
                    story_id=str(story_id) if story_id else None,
                    quantity=quantity,
                    coins_spent=coins,
                    diamonds_earned=creator_share,
                    platform_fee_ppm=self.platform_fee_ppm,
                    ledger_transaction_id=tx_id,
                )
        except DatabaseError:
            # Ledger is authoritative; a missing receipt is tolerated
            logger.warning(
                "gift receipt write failed",
                exc_info=True,
                extra={"ledger_transaction_id": tx_id, "sender_id": str(sender_id)},
            )
