# gifting/services/exceptions.py

"""
GIFTING SERVICE ERRORS
"""

from common.exceptions import (
    CATEGORY_VELOCITY,
    IntegrationError,
    MonetizationError,
    ValidationFailure,
)


class InvalidGiftError(ValidationFailure):
    """Unknown or inactive gift code."""

    code = "INVALID_GIFT"


class VelocityLimitExceededError(MonetizationError):
    """Sender exceeded a spend ceiling. Retry only after the bucket expires."""

    code = "VELOCITY_LIMIT_EXCEEDED"
    category = CATEGORY_VELOCITY


class VelocityServiceError(IntegrationError):
    """Counter service unavailable. The limiter fails closed."""

    code = "VELOCITY_SERVICE_UNAVAILABLE"
    http_status = 503
