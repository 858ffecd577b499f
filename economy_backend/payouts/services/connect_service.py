# payouts/services/connect_service.py

"""
CONNECTED-ACCOUNT SERVICE (THIN)

Wraps the processor's Connect flows. Persists only:
- the opaque provider account id
- details_submitted / payouts_enabled / requirements_due
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from payouts.models.creator_account import CreatorAccount

logger = logging.getLogger(__name__)


def _readiness(account: dict) -> dict:
    requirements = account.get("requirements") or {}
    return {
        "details_submitted": bool(account.get("details_submitted")),
        "payouts_enabled": bool(account.get("payouts_enabled")),
        "requirements_due": list(requirements.get("currently_due") or []),
    }


class ConnectService:
    def __init__(self, *, stripe):
        self.stripe = stripe

    def ensure_account(self, user_id, *, email: str = "") -> CreatorAccount:
        user_id = str(user_id)
        existing = CreatorAccount.objects.filter(user_id=user_id).first()
        if existing is not None:
            return existing

        account = self.stripe.create_connected_account(user_id=user_id, email=email)
        try:
            with transaction.atomic():
                created = CreatorAccount.objects.create(
                    user_id=user_id,
                    provider="stripe",
                    provider_account_id=account["id"],
                    **_readiness(account),
                )
        except IntegrityError:
            # The processor call is idempotent per user; the other writer's row wins
            return CreatorAccount.objects.get(user_id=user_id)

        logger.info(
            "connected account created",
            extra={"user_id": user_id, "provider_account_id": created.provider_account_id},
        )
        return created

    def onboarding_link(self, user_id, return_url: str, refresh_url: str | None = None, *, email: str = "") -> str:
        account = self.ensure_account(user_id, email=email)
        link = self.stripe.create_account_link(
            account_id=account.provider_account_id,
            return_url=return_url,
            refresh_url=refresh_url or return_url,
        )
        return link["url"]

    def refresh_account_status(self, user_id) -> CreatorAccount | None:
        account = CreatorAccount.objects.filter(user_id=str(user_id)).first()
        if account is None:
            return None
        remote = self.stripe.retrieve_account(account.provider_account_id)
        return self._apply(account, remote)

    def apply_account_update(self, remote: dict) -> CreatorAccount | None:
        """account.updated webhook payload -> local readiness flags."""
        account = CreatorAccount.objects.filter(provider_account_id=remote.get("id")).first()
        if account is None:
            logger.info("account.updated for unknown account", extra={"provider_account_id": remote.get("id")})
            return None
        return self._apply(account, remote)

    def get_status(self, user_id) -> dict:
        account = CreatorAccount.objects.filter(user_id=str(user_id)).first()
        if account is None:
            return {
                "connected": False,
                "details_submitted": False,
                "payouts_enabled": False,
                "requirements_due": [],
            }
        return {
            "connected": True,
            "details_submitted": account.details_submitted,
            "payouts_enabled": account.payouts_enabled,
            "requirements_due": account.requirements_due,
        }

    @staticmethod
    def _apply(account: CreatorAccount, remote: dict) -> CreatorAccount:
        for field, value in _readiness(remote).items():
            setattr(account, field, value)
        account.save(update_fields=["details_submitted", "payouts_enabled", "requirements_due", "updated_at"])
        return account
