# backend/container.py

"""
======================================================
PATH: backend/container.py
======================================================
SERVICE CONTAINER

One place that wires the economy services together from settings.
Views call get_services(); tests that override settings call
get_services.cache_clear() so the next call rebuilds from the new values.

Dependency graph:
    ledger ─┬─ wallets ─┬─ gifts (+ velocity)
            │           ├─ entitlements
            │           └─ coin_purchases (+ stripe)
            ├─ earnings (+ rates)
            └─ payout_approval (+ stripe)
    stripe ── connect
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from django.conf import settings
from django.core.cache import caches

from entitlements.services.entitlement_service import EntitlementService
from gifting.services.gift_service import GiftService
from gifting.services.velocity_limiter import VelocityLimiter
from ledger.services.conversion_service import ConversionRateTable
from ledger.services.ledger_engine import LedgerEngine
from payments.services.coin_purchase_service import CoinPurchaseService
from payments.services.stripe_client import StripeClient
from payouts.services.connect_service import ConnectService
from payouts.services.earnings_service import EarningsService
from payouts.services.payout_approval import PayoutApprovalService
from wallets.services.wallet_store import WalletStore


@dataclass(frozen=True)
class Services:
    ledger: LedgerEngine
    rates: ConversionRateTable
    wallets: WalletStore
    velocity: VelocityLimiter
    gifts: GiftService
    entitlements: EntitlementService
    earnings: EarningsService
    stripe: StripeClient
    connect: ConnectService
    payout_approval: PayoutApprovalService
    coin_purchases: CoinPurchaseService


def build_services() -> Services:
    ledger = LedgerEngine()
    rates = ConversionRateTable(ttl_seconds=settings.RATE_CACHE_SECONDS)
    wallets = WalletStore(ledger=ledger)

    velocity = VelocityLimiter(
        cache=caches["velocity"],
        per_second_limit=settings.VELOCITY_PER_SECOND_LIMIT,
        per_hour_limit=settings.VELOCITY_PER_HOUR_LIMIT,
    )

    stripe = StripeClient(
        secret_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        connect_webhook_secret=settings.STRIPE_CONNECT_WEBHOOK_SECRET,
        api_base=settings.STRIPE_API_BASE,
        timeout=settings.STRIPE_TIMEOUT_SECONDS,
        webhook_tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
    )

    return Services(
        ledger=ledger,
        rates=rates,
        wallets=wallets,
        velocity=velocity,
        gifts=GiftService(
            wallets=wallets,
            ledger=ledger,
            velocity=velocity,
            platform_fee_ppm=settings.GIFT_PLATFORM_FEE_PPM,
        ),
        entitlements=EntitlementService(wallets=wallets),
        earnings=EarningsService(
            ledger=ledger,
            rates=rates,
            minimum_cents=settings.PAYOUT_MINIMUM_CENTS,
        ),
        stripe=stripe,
        connect=ConnectService(stripe=stripe),
        payout_approval=PayoutApprovalService(ledger=ledger, stripe=stripe),
        coin_purchases=CoinPurchaseService(
            wallets=wallets,
            ledger=ledger,
            stripe=stripe,
            cents_per_100_coins=settings.COIN_PRICE_CENTS_PER_100,
        ),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services()
