# payments/services/coin_purchase_service.py

"""
======================================================
PATH: payments/services/coin_purchase_service.py
======================================================
COIN PURCHASE SERVICE

create_purchase_intent():
- price = ceil(coins * COIN_PRICE_CENTS_PER_100 / 100) USD cents
- Stripe PaymentIntent carries user_id + amount_coins in metadata

handle_payment_succeeded():
- CoinPurchase row is unique per provider payment id -> credit at most once
- Wallet credit (COIN legs) + cash receipt:
      USD debit platform_cash / credit platform_coin_sales

handle_charge_refunded():
- Purchase marked refunded
- Debits up to the coins still unspent (never drives a wallet negative)
- Cash refund for the newly refunded cents only:
      USD debit platform_refund_expense / credit platform_cash

handle_dispute_created():
- USD debit platform_dispute_reserve / credit platform_cash
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from ledger.models.entry import USD
from ledger.services import accounts
from ledger.services.exceptions import LedgerIdempotencyError
from payments.models.coin_purchase import CoinPurchase
from payments.services.exceptions import PaymentProcessorError
from wallets.services.exceptions import InvalidAmountError

logger = logging.getLogger(__name__)

DEFAULT_CENTS_PER_100_COINS = 99
# Stripe's smallest USD charge
MIN_CHARGE_CENTS = 50


def _usd(currency) -> str:
    code = str(currency or "usd").upper()
    if code != USD:
        raise PaymentProcessorError(f"Unsupported currency: {code}")
    return code


def _int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class CoinPurchaseService:
    def __init__(self, *, wallets, ledger, stripe, cents_per_100_coins: int = DEFAULT_CENTS_PER_100_COINS):
        self.wallets = wallets
        self.ledger = ledger
        self.stripe = stripe
        self.cents_per_100_coins = int(cents_per_100_coins)

    def price_cents(self, amount_coins: int) -> int:
        # ceil without floats
        return -(-int(amount_coins) * self.cents_per_100_coins // 100)

    def create_purchase_intent(self, user_id, amount_coins) -> dict:
        if isinstance(amount_coins, bool) or not isinstance(amount_coins, int) or amount_coins <= 0:
            raise InvalidAmountError("amount_coins must be a positive integer")

        cents = self.price_cents(amount_coins)
        if cents < MIN_CHARGE_CENTS:
            raise InvalidAmountError(f"Minimum purchase is {MIN_CHARGE_CENTS} cents")

        intent = self.stripe.create_payment_intent(
            amount_cents=cents,
            currency=USD,
            metadata={"user_id": str(user_id), "amount_coins": str(amount_coins)},
        )
        logger.info(
            "coin purchase intent created",
            extra={"user_id": str(user_id), "coins": amount_coins, "cents": cents, "intent_id": intent.get("id")},
        )
        return {
            "client_secret": intent.get("client_secret"),
            "intent_id": intent.get("id"),
            "amount_cents": cents,
            "amount_coins": amount_coins,
        }

    # ============================================================
    # WEBHOOK HANDLERS
    # ============================================================

    def handle_payment_succeeded(self, intent: dict) -> CoinPurchase | None:
        metadata = intent.get("metadata") or {}
        user_id = str(metadata.get("user_id") or "").strip()
        coins = _int(metadata.get("amount_coins"))
        payment_id = intent.get("id")

        if not user_id or coins <= 0 or not payment_id:
            logger.info("payment_intent.succeeded without coin metadata", extra={"intent_id": payment_id})
            return None

        amount = _int(intent.get("amount_received") or intent.get("amount"))
        currency = _usd(intent.get("currency"))

        if CoinPurchase.objects.filter(provider="stripe", provider_payment_id=payment_id).exists():
            logger.info("coin purchase already credited", extra={"intent_id": payment_id})
            return None

        try:
            with transaction.atomic():
                purchase = CoinPurchase.objects.create(
                    user_id=user_id,
                    provider="stripe",
                    provider_payment_id=payment_id,
                    status=CoinPurchase.STATUS_SUCCEEDED,
                    amount=amount,
                    currency=currency,
                    coins_credited=coins,
                )
                ref = {"reference_type": "psp", "reference_id": payment_id}
                self.wallets.credit_coins(
                    user_id,
                    coins,
                    metadata={"provider": "stripe"},
                    description="Coin purchase (Stripe)",
                    **ref,
                )
                if amount > 0:
                    self.ledger.record(
                        [
                            {"account": accounts.PLATFORM_CASH, "debit": amount, "currency": USD, **ref},
                            {"account": accounts.PLATFORM_COIN_SALES, "credit": amount, "currency": USD, **ref},
                        ],
                        description=f"Coin purchase cash {payment_id}",
                        idempotency_key=f"psp:stripe:{payment_id}",
                    )
        except IntegrityError:
            # Concurrent delivery of the same event already inserted the row
            logger.info("coin purchase raced; already credited", extra={"intent_id": payment_id})
            return None

        logger.info(
            "coin purchase credited",
            extra={"user_id": user_id, "coins": coins, "intent_id": payment_id},
        )
        return purchase

    def handle_charge_refunded(self, charge: dict) -> CoinPurchase | None:
        payment_intent = charge.get("payment_intent")
        payment_id = payment_intent.get("id") if isinstance(payment_intent, dict) else payment_intent
        if not payment_id:
            return None

        with transaction.atomic():
            purchase = (
                CoinPurchase.objects.select_for_update()
                .filter(provider="stripe", provider_payment_id=payment_id)
                .first()
            )
            if purchase is None:
                logger.warning("refund for unknown coin purchase", extra={"intent_id": payment_id})
                return None

            purchase.status = CoinPurchase.STATUS_REFUNDED

            remaining = max(0, int(purchase.coins_credited) - int(purchase.refunded_coins))
            to_reverse = min(remaining, self.wallets.get_balance(purchase.user_id))
            if to_reverse > 0:
                self.wallets.debit_coins(
                    purchase.user_id,
                    to_reverse,
                    reference_type="refund",
                    reference_id=payment_id,
                    metadata={"reason": "charge_refunded"},
                    description="Coin purchase refunded",
                )
                purchase.refunded_coins = int(purchase.refunded_coins) + to_reverse

            refunded_total = _int(charge.get("amount_refunded"))
            refund_delta = refunded_total - int(purchase.refunded_amount)
            if refund_delta > 0:
                currency = _usd(charge.get("currency"))
                ref = {"reference_type": "refund", "reference_id": payment_id}
                self.ledger.record(
                    [
                        {"account": accounts.PLATFORM_REFUND_EXPENSE, "debit": refund_delta, "currency": currency, **ref},
                        {"account": accounts.PLATFORM_CASH, "credit": refund_delta, "currency": currency, **ref},
                    ],
                    description=f"Refund {payment_id}",
                    idempotency_key=f"refund:stripe:{payment_id}:{refunded_total}",
                )
                purchase.refunded_amount = refunded_total

            purchase.save(update_fields=["status", "refunded_coins", "refunded_amount", "updated_at"])

        if to_reverse < remaining:
            logger.warning(
                "refunded coins already spent",
                extra={"user_id": purchase.user_id, "unrecoverable_coins": remaining - to_reverse},
            )
        return purchase

    def handle_dispute_created(self, dispute: dict) -> str | None:
        amount = _int(dispute.get("amount"))
        dispute_id = dispute.get("id")
        if amount <= 0 or not dispute_id:
            return None

        currency = _usd(dispute.get("currency"))
        ref = {"reference_type": "dispute", "reference_id": dispute_id}
        try:
            tx_id = self.ledger.record(
                [
                    {"account": accounts.PLATFORM_DISPUTE_RESERVE, "debit": amount, "currency": currency, **ref},
                    {"account": accounts.PLATFORM_CASH, "credit": amount, "currency": currency, **ref},
                ],
                description=f"Dispute {dispute_id}",
                idempotency_key=f"dispute:stripe:{dispute_id}",
            )
        except LedgerIdempotencyError:
            logger.info("dispute already reserved", extra={"dispute_id": dispute_id})
            return None

        logger.warning(
            "dispute opened; funds reserved",
            extra={"dispute_id": dispute_id, "amount": amount, "payment_intent": dispute.get("payment_intent")},
        )
        return tx_id
