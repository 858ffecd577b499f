# payments/services/exceptions.py

"""
PAYMENTS SERVICE ERRORS
"""

from common.exceptions import IntegrationError


class PaymentProcessorError(IntegrationError):
    """Stripe rejected the request, was unreachable, or is not configured."""

    code = "PAYMENT_PROCESSOR_ERROR"
