# ledger/services/balance_service.py

"""
LEDGER BALANCE & INTEGRITY SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- LedgerEntry is the single source of truth
- Balance = sum(credit) - sum(debit), per account AND currency
- Never mix currencies in one number
"""

from __future__ import annotations

from django.db.models import F, Max, Q, Sum
from django.db.models.functions import Coalesce

from ledger.models.entry import COIN, CURRENCIES, LedgerEntry


def _totals(qs) -> dict:
    return qs.aggregate(
        debit_total=Coalesce(Sum("debit"), 0),
        credit_total=Coalesce(Sum("credit"), 0),
    )


def get_account_balance(account: str, *, currency: str = COIN) -> int:
    totals = _totals(LedgerEntry.objects.filter(account=account, currency=currency))
    return int(totals["credit_total"]) - int(totals["debit_total"])


def get_account_balance_with_watermark(account: str, *, currency: str) -> tuple[int, int]:
    """
    Balance plus the highest entry id it was computed from.

    The watermark lets writers derive an idempotency key that is unique per
    observed state: two requests computed from the same read share a key.
    """
    qs = LedgerEntry.objects.filter(account=account, currency=currency)
    aggregates = qs.aggregate(
        debit_total=Coalesce(Sum("debit"), 0),
        credit_total=Coalesce(Sum("credit"), 0),
        watermark=Coalesce(Max("id"), 0),
    )
    balance = int(aggregates["credit_total"]) - int(aggregates["debit_total"])
    return balance, int(aggregates["watermark"])


def get_currency_totals() -> dict[str, dict]:
    """
    Global debit/credit totals per currency. Balanced ledger => equal sides.
    """
    rows = (
        LedgerEntry.objects.values("currency")
        .annotate(debit_total=Sum("debit"), credit_total=Sum("credit"))
        .order_by("currency")
    )
    out = {c: {"debit": 0, "credit": 0} for c in CURRENCIES}
    for row in rows:
        out[row["currency"]] = {
            "debit": int(row["debit_total"] or 0),
            "credit": int(row["credit_total"] or 0),
        }
    return out


def find_unbalanced_transactions(*, limit: int | None = None) -> list[dict]:
    """
    Transactions whose debits != credits within any single currency.
    """
    qs = (
        LedgerEntry.objects.values("transaction_id", "currency")
        .annotate(debit_total=Sum("debit"), credit_total=Sum("credit"))
        .filter(~Q(debit_total=F("credit_total")))
        .order_by("transaction_id", "currency")
    )
    if limit:
        qs = qs[:limit]

    return [
        {
            "transaction_id": str(row["transaction_id"]),
            "currency": row["currency"],
            "debit": int(row["debit_total"] or 0),
            "credit": int(row["credit_total"] or 0),
        }
        for row in qs
    ]


def get_user_coin_balances() -> dict[str, int]:
    """
    COIN balance per user_coin_wallet:* account, keyed by user id.
    """
    rows = (
        LedgerEntry.objects.filter(
            currency=COIN, account__startswith="user_coin_wallet:"
        )
        .values("account")
        .annotate(debit_total=Sum("debit"), credit_total=Sum("credit"))
    )
    out: dict[str, int] = {}
    for row in rows:
        user_id = row["account"].split(":", 1)[1]
        out[user_id] = int(row["credit_total"] or 0) - int(row["debit_total"] or 0)
    return out
