# common/auth.py

from __future__ import annotations


def request_user_id(request) -> str:
    """
    Stable string id for the authenticated user.

    Wallets, ledger entries and payouts key on this string, never on the
    auth model itself.
    """
    return str(request.user.pk)
