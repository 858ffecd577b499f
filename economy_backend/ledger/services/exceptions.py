# ledger/services/exceptions.py

"""
LEDGER SERVICE ERRORS

Centralized domain errors for the ledger engine and conversion table.
Ledger errors are programmer/integration failures: they are never swallowed.
"""

from common.exceptions import (
    CATEGORY_CONFIGURATION,
    CATEGORY_LEDGER,
    InvalidAmountError,
    MonetizationError,
)

__all__ = [
    "LedgerError",
    "LedgerInvalidEntryError",
    "LedgerImbalanceError",
    "LedgerIdempotencyError",
    "LedgerWriteError",
    "RateNotFoundError",
    "InvalidAmountError",
]


class LedgerError(MonetizationError):
    """Base exception for all ledger engine failures."""

    category = CATEGORY_LEDGER


class LedgerInvalidEntryError(LedgerError):
    """Raised when an entry is malformed (account, side, amount, currency)."""

    code = "LEDGER_INVALID_ENTRY"


class LedgerImbalanceError(LedgerError):
    """Raised when debits != credits for a currency within one transaction."""

    code = "LEDGER_IMBALANCE"


class LedgerIdempotencyError(LedgerError):
    """Raised on a duplicate idempotency key or transaction id."""

    code = "LEDGER_IDEMPOTENCY"


class LedgerWriteError(LedgerError):
    """Raised when the database rejects an otherwise valid transaction."""

    code = "LEDGER_WRITE_FAILED"


class RateNotFoundError(MonetizationError):
    code = "RATE_NOT_FOUND"
    category = CATEGORY_CONFIGURATION
