# entitlements/services/entitlement_service.py

"""
ENTITLEMENTS SERVICE

- has_entitlement: False when absent OR expired
- grant_entitlement: upsert; granting over an expired row renews it
- purchase_entitlement_with_coins: wallet debit THEN grant, one DB transaction

Double-click protection is the caller's job (the API view checks
has_entitlement first).
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from entitlements.models.entitlement import Entitlement

logger = logging.getLogger(__name__)

PREMIUM_UNLOCK = Entitlement.TYPE_PREMIUM_UNLOCK


class EntitlementService:
    def __init__(self, *, wallets):
        self.wallets = wallets

    def has_entitlement(self, user_id, story_id, entitlement_type: str = PREMIUM_UNLOCK) -> bool:
        now = timezone.now()
        return (
            Entitlement.objects.filter(
                user_id=str(user_id),
                story_id=str(story_id),
                entitlement_type=entitlement_type,
            )
            .filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))
            .exists()
        )

    def grant_entitlement(
        self,
        user_id,
        story_id,
        entitlement_type: str = PREMIUM_UNLOCK,
        source: str = Entitlement.SOURCE_GRANT,
        expires_at=None,
    ) -> Entitlement:
        lookup = {
            "user_id": str(user_id),
            "story_id": str(story_id),
            "entitlement_type": entitlement_type,
        }
        defaults = {"source": source, "expires_at": expires_at}

        try:
            with transaction.atomic():
                entitlement, created = Entitlement.objects.update_or_create(
                    defaults=defaults, **lookup
                )
        except IntegrityError:
            # Concurrent grant won the insert; apply ours as an update
            Entitlement.objects.filter(**lookup).update(**defaults)
            entitlement, created = Entitlement.objects.get(**lookup), False

        logger.info(
            "entitlement granted" if created else "entitlement renewed",
            extra={**lookup, "source": source},
        )
        return entitlement

    def purchase_entitlement_with_coins(self, user_id, story_id, price_coins: int) -> Entitlement:
        with transaction.atomic():
            self.wallets.debit_coins(
                user_id,
                price_coins,
                reference_type="entitlement",
                reference_id=str(story_id),
                metadata={"entitlement_type": PREMIUM_UNLOCK},
                description=f"Unlock story {story_id}",
            )
            return self.grant_entitlement(
                user_id,
                story_id,
                PREMIUM_UNLOCK,
                source=Entitlement.SOURCE_COINS,
            )
