# common/exceptions.py

"""
MONETIZATION ERROR TAXONOMY

Every domain error raised by the ledger, wallet, gifting, entitlement and
payout services derives from MonetizationError.

Each error carries:
- code:      stable machine-readable identifier (e.g. INSUFFICIENT_BALANCE)
- category:  coarse class used for HTTP mapping and retry policy
- retryable: whether the CALLER may retry (after cool-down where relevant)

Rules:
- Financial errors are never caught-and-ignored by services.
- LEDGER errors are programmer/integration failures and must surface.
"""

from __future__ import annotations

CATEGORY_VALIDATION = "VALIDATION"
CATEGORY_INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
CATEGORY_VELOCITY = "VELOCITY_LIMIT_EXCEEDED"
CATEGORY_CONCURRENCY = "CONCURRENT_UPDATE_FAILED"
CATEGORY_LEDGER = "LEDGER"
CATEGORY_CONFIGURATION = "CONFIGURATION"
CATEGORY_INTEGRATION = "INTEGRATION"


class MonetizationError(Exception):
    """Base exception for all monetization service failures."""

    code = "MONETIZATION_ERROR"
    category = CATEGORY_INTEGRATION
    retryable = False
    # Overrides the category HTTP status when set
    http_status = None

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.context = context

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationFailure(MonetizationError):
    category = CATEGORY_VALIDATION


class InvalidAmountError(ValidationFailure):
    code = "INVALID_AMOUNT"


class InvalidRequestError(ValidationFailure):
    """Missing or malformed identifiers, e.g. an empty user id."""

    code = "INVALID_REQUEST"


class ConcurrentUpdateError(MonetizationError):
    """Raised after the store's own bounded retries are exhausted."""

    code = "CONCURRENT_UPDATE_FAILED"
    category = CATEGORY_CONCURRENCY
    retryable = True


class IntegrationError(MonetizationError):
    category = CATEGORY_INTEGRATION
