# payments/views/webhooks.py

"""
STRIPE WEBHOOKS

- /api/payments/webhooks/stripe/           payment events (coin purchases)
- /api/payments/webhooks/stripe-connect/   Connect events (transfers, accounts)

Rules:
- Signature verified on the RAW body before anything else
- Replays suppressed with a cache add() lock per event id; the lock is
  released when processing fails so the processor's retry is honoured
- Domain failures answer 500 so the processor retries; they are logged
"""

from __future__ import annotations

import json
import logging

from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.container import get_services
from common.exceptions import MonetizationError
from payouts.models.payout import Payout

logger = logging.getLogger(__name__)

REPLAY_LOCK_TTL = 60 * 60 * 24


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


class _StripeWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [WebhookThrottle]

    lock_namespace = "stripe"

    def get_secret(self, stripe) -> str:
        raise NotImplementedError

    def dispatch_event(self, event_type: str, obj: dict) -> None:
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        # body must be read before anything touches request.data
        raw_body = request.body or b""
        signature = request.headers.get("Stripe-Signature")
        stripe = get_services().stripe

        if not signature:
            logger.warning("stripe webhook without signature", extra={"namespace": self.lock_namespace})
            return Response({"ok": False, "detail": "Missing signature"}, status=status.HTTP_400_BAD_REQUEST)

        if not stripe.verify_signature(raw_body=raw_body, header=signature, secret=self.get_secret(stripe)):
            logger.warning("invalid stripe signature", extra={"namespace": self.lock_namespace})
            return Response({"ok": False, "detail": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            event = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            return Response({"ok": False, "detail": "Invalid JSON"}, status=status.HTTP_400_BAD_REQUEST)

        event_id = event.get("id")
        event_type = str(event.get("type") or "")
        obj = (event.get("data") or {}).get("object") or {}

        lock_key = f"webhook:{self.lock_namespace}:event:{event_id}" if event_id else None
        if lock_key and not cache.add(lock_key, 1, timeout=REPLAY_LOCK_TTL):
            logger.info("stripe webhook replay ignored", extra={"event_id": event_id})
            return Response({"received": True, "replay": True}, status=status.HTTP_200_OK)

        try:
            self.dispatch_event(event_type, obj)
        except MonetizationError:
            if lock_key:
                cache.delete(lock_key)
            logger.exception(
                "stripe webhook processing failed",
                extra={"event_id": event_id, "event_type": event_type},
            )
            return Response({"ok": False, "detail": "Webhook processing failed"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info("stripe webhook processed", extra={"event_id": event_id, "event_type": event_type})
        return Response({"received": True}, status=status.HTTP_200_OK)


class StripePaymentsWebhookView(_StripeWebhookView):
    lock_namespace = "stripe"

    def get_secret(self, stripe) -> str:
        return stripe.webhook_secret

    def dispatch_event(self, event_type: str, obj: dict) -> None:
        purchases = get_services().coin_purchases
        if event_type == "payment_intent.succeeded":
            purchases.handle_payment_succeeded(obj)
        elif event_type == "charge.refunded":
            purchases.handle_charge_refunded(obj)
        elif event_type == "charge.dispute.created":
            purchases.handle_dispute_created(obj)


class StripeConnectWebhookView(_StripeWebhookView):
    lock_namespace = "stripe-connect"

    def get_secret(self, stripe) -> str:
        return stripe.connect_webhook_secret

    def dispatch_event(self, event_type: str, obj: dict) -> None:
        services = get_services()
        transfer_id = obj.get("id")

        if event_type == "transfer.created":
            services.payout_approval.mark_transfer_status(transfer_id, Payout.STATUS_PROCESSING)
        elif event_type == "transfer.reversed" or (
            event_type == "transfer.updated" and obj.get("reversed")
        ):
            services.payout_approval.mark_transfer_status(
                transfer_id, Payout.STATUS_FAILED, reason="transfer reversed"
            )
        elif event_type == "account.updated":
            services.connect.apply_account_update(obj)
