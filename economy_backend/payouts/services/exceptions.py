# payouts/services/exceptions.py

"""
PAYOUT SERVICE ERRORS
"""

from common.exceptions import (
    ConcurrentUpdateError,
    IntegrationError,
    ValidationFailure,
)

__all__ = [
    "NoEarningsError",
    "BelowMinimumError",
    "PayoutStateError",
    "PayoutsNotEnabledError",
    "ConcurrentUpdateError",
]


class NoEarningsError(ValidationFailure):
    code = "NO_EARNINGS"


class BelowMinimumError(ValidationFailure):
    code = "BELOW_MINIMUM"


class PayoutStateError(ValidationFailure):
    """Payout is not in a state that allows the requested transition."""

    code = "PAYOUT_STATE"


class PayoutsNotEnabledError(IntegrationError):
    """Creator has no connected account, or the processor has not enabled payouts."""

    code = "PAYOUTS_NOT_ENABLED"
