# wallets/services/exceptions.py

"""
WALLET SERVICE ERRORS
"""

from common.exceptions import (
    CATEGORY_INSUFFICIENT_FUNDS,
    ConcurrentUpdateError,
    InvalidAmountError,
    InvalidRequestError,
    MonetizationError,
)

__all__ = [
    "InsufficientBalanceError",
    "ConcurrentUpdateError",
    "InvalidAmountError",
    "InvalidRequestError",
]


class InsufficientBalanceError(MonetizationError):
    """Debit larger than the current balance. Never retried by the store."""

    code = "INSUFFICIENT_BALANCE"
    category = CATEGORY_INSUFFICIENT_FUNDS
