# payouts/services/payout_approval.py

"""
PAYOUT APPROVAL (ADMIN) + TRANSFER STATUS

approve_payout():
- Payout must be pending_review (row locked)
- Creator's connected account must have payouts_enabled
- Stripe transfer (idempotency key payout:{id})
- status -> processing, provider_payout_id stored
- ledger USD: debit creator_payout_payable:{creator} / credit platform_cash

mark_transfer_status() (webhooks):
- processing -> paid | failed
- A failed transfer re-opens the payable with an offsetting entry:
  debit platform_cash / credit creator_payout_payable:{creator}
"""

from __future__ import annotations

import logging

from django.db import transaction

from ledger.models.entry import USD
from ledger.services import accounts
from payouts.models.creator_account import CreatorAccount
from payouts.models.payout import Payout
from payouts.services.exceptions import PayoutsNotEnabledError, PayoutStateError

logger = logging.getLogger(__name__)


class PayoutApprovalService:
    def __init__(self, *, ledger, stripe):
        self.ledger = ledger
        self.stripe = stripe

    def list_pending(self):
        return Payout.objects.filter(status=Payout.STATUS_PENDING_REVIEW).order_by("created_at")

    @transaction.atomic
    def approve_payout(self, payout_id) -> Payout:
        payout = Payout.objects.select_for_update().filter(pk=payout_id).first()
        if payout is None:
            raise PayoutStateError(f"Payout {payout_id} not found")

        if payout.status != Payout.STATUS_PENDING_REVIEW:
            raise PayoutStateError(
                f"Payout {payout.pk} is {payout.status}, expected {Payout.STATUS_PENDING_REVIEW}"
            )

        account = CreatorAccount.objects.filter(user_id=payout.creator_id).first()
        if account is None or not account.payouts_enabled:
            raise PayoutsNotEnabledError(
                "Creator payouts are not enabled", creator_id=payout.creator_id
            )

        transfer = self.stripe.create_transfer(
            amount_cents=payout.amount,
            currency=payout.currency,
            destination=account.provider_account_id,
            idempotency_key=f"payout:{payout.pk}",
            metadata={"payout_id": str(payout.pk), "creator_id": payout.creator_id},
        )

        payout.status = Payout.STATUS_PROCESSING
        payout.provider_payout_id = transfer["id"]
        payout.save(update_fields=["status", "provider_payout_id", "updated_at"])

        ref = {"reference_type": "payout", "reference_id": str(payout.pk)}
        self.ledger.record(
            [
                {
                    "account": accounts.creator_payout_payable(payout.creator_id),
                    "user_id": payout.creator_id,
                    "debit": payout.amount,
                    "currency": USD,
                    **ref,
                },
                {"account": accounts.PLATFORM_CASH, "credit": payout.amount, "currency": USD, **ref},
            ],
            description=f"Payout #{payout.pk} transfer {transfer['id']}",
            idempotency_key=f"payout-transfer:{payout.pk}",
        )

        logger.info(
            "payout approved",
            extra={"payout_id": payout.pk, "transfer_id": transfer["id"], "amount": payout.amount},
        )
        return payout

    @transaction.atomic
    def mark_transfer_status(self, provider_payout_id: str, status: str, *, reason: str = "") -> Payout | None:
        payout = (
            Payout.objects.select_for_update()
            .filter(provider_payout_id=provider_payout_id)
            .first()
        )
        if payout is None:
            logger.info("transfer status for unknown payout", extra={"provider_payout_id": provider_payout_id})
            return None

        if payout.status == status:
            return payout

        if not payout.can_transition_to(status):
            # Out-of-order processor events must not regress a settled payout
            logger.warning(
                "stale transfer status ignored",
                extra={"payout_id": payout.pk, "current": payout.status, "incoming": status},
            )
            return payout

        previous = payout.status
        payout.status = status
        payout.failure_reason = (reason or "")[:255]
        payout.save(update_fields=["status", "failure_reason", "updated_at"])

        if status == Payout.STATUS_FAILED and previous == Payout.STATUS_PROCESSING:
            ref = {"reference_type": "payout", "reference_id": str(payout.pk)}
            self.ledger.record(
                [
                    {"account": accounts.PLATFORM_CASH, "debit": payout.amount, "currency": USD, **ref},
                    {
                        "account": accounts.creator_payout_payable(payout.creator_id),
                        "user_id": payout.creator_id,
                        "credit": payout.amount,
                        "currency": USD,
                        **ref,
                    },
                ],
                description=f"Payout #{payout.pk} transfer reversed",
                idempotency_key=f"payout-reversal:{payout.pk}",
            )

        logger.info(
            "payout status changed",
            extra={"payout_id": payout.pk, "from": previous, "to": status},
        )
        return payout
