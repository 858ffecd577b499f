# common/responses.py

"""
API ERROR NORMALIZATION

All monetization endpoints answer failures with the same envelope:

    {"error": {"code": "...", "message": "..."}}

Ledger and configuration failures never leak internals to the client: the
message is replaced with a generic one (the real cause is already logged).
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from common.exceptions import (
    CATEGORY_CONCURRENCY,
    CATEGORY_CONFIGURATION,
    CATEGORY_INSUFFICIENT_FUNDS,
    CATEGORY_INTEGRATION,
    CATEGORY_LEDGER,
    CATEGORY_VALIDATION,
    CATEGORY_VELOCITY,
    MonetizationError,
)

HTTP_STATUS_BY_CATEGORY = {
    CATEGORY_VALIDATION: status.HTTP_400_BAD_REQUEST,
    CATEGORY_INSUFFICIENT_FUNDS: status.HTTP_402_PAYMENT_REQUIRED,
    CATEGORY_VELOCITY: status.HTTP_429_TOO_MANY_REQUESTS,
    CATEGORY_CONCURRENCY: status.HTTP_409_CONFLICT,
    CATEGORY_LEDGER: status.HTTP_500_INTERNAL_SERVER_ERROR,
    CATEGORY_CONFIGURATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
    CATEGORY_INTEGRATION: status.HTTP_502_BAD_GATEWAY,
}

_GENERIC_MESSAGES = {
    CATEGORY_LEDGER: "The operation could not be completed. Please try again later.",
    CATEGORY_CONFIGURATION: "The operation could not be completed. Please try again later.",
    CATEGORY_CONCURRENCY: "Your balance changed while we were processing. Please try again.",
}


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def monetization_error_response(exc: MonetizationError):
    http_status = exc.http_status or HTTP_STATUS_BY_CATEGORY.get(
        exc.category, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    message = _GENERIC_MESSAGES.get(exc.category, exc.message)
    return error_response(code=exc.code, message=message, http_status=http_status)
