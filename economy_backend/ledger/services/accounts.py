# ledger/services/accounts.py

"""
LEDGER ACCOUNT NAMES

Accounts are logical strings, not rows. Keep every name the economy posts to
in this module so balances and reports never depend on string formatting
scattered across services.
"""

from __future__ import annotations

# Platform-side accounts
PLATFORM_COIN_LIABILITY = "platform_coin_liability"
PLATFORM_COIN_REDEMPTIONS = "platform_coin_redemptions"
PLATFORM_DIAMOND_ISSUANCE = "platform_diamond_issuance"
PLATFORM_DIAMOND_REDEMPTIONS = "platform_diamond_redemptions"
PLATFORM_REVENUE = "platform_revenue"
PLATFORM_PAYOUT_EXPENSE = "platform_payout_expense"
PLATFORM_REFUND_EXPENSE = "platform_refund_expense"
PLATFORM_CASH = "platform_cash"
PLATFORM_COIN_SALES = "platform_coin_sales"
PLATFORM_DISPUTE_RESERVE = "platform_dispute_reserve"

# Per-user prefixes
USER_COIN_WALLET_PREFIX = "user_coin_wallet"
CREATOR_EARNINGS_PREFIX = "creator_earnings"
CREATOR_PAYOUT_PAYABLE_PREFIX = "creator_payout_payable"


def _scoped(prefix: str, owner_id) -> str:
    owner = str(owner_id or "").strip()
    if not owner:
        raise ValueError(f"{prefix} account requires an owner id")
    return f"{prefix}:{owner}"


def user_coin_wallet(user_id) -> str:
    return _scoped(USER_COIN_WALLET_PREFIX, user_id)


def creator_earnings(creator_id) -> str:
    return _scoped(CREATOR_EARNINGS_PREFIX, creator_id)


def creator_payout_payable(creator_id) -> str:
    return _scoped(CREATOR_PAYOUT_PAYABLE_PREFIX, creator_id)
