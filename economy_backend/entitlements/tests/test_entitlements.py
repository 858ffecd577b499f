# entitlements/tests/test_entitlements.py

from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from backend.container import get_services
from entitlements.models.entitlement import Entitlement
from entitlements.services.entitlement_service import EntitlementService
from ledger.models.entry import LedgerEntry
from ledger.services.ledger_engine import LedgerEngine
from wallets.services.exceptions import InsufficientBalanceError
from wallets.services.wallet_store import WalletStore


class EntitlementServiceTests(TestCase):
    def setUp(self):
        self.wallets = WalletStore(ledger=LedgerEngine())
        self.service = EntitlementService(wallets=self.wallets)

    def test_absent_entitlement(self):
        self.assertFalse(self.service.has_entitlement("u1", "story-1"))

    def test_grant_without_expiry_never_expires(self):
        self.service.grant_entitlement("u1", "story-1")

        self.assertTrue(self.service.has_entitlement("u1", "story-1"))
        self.assertFalse(self.service.has_entitlement("u1", "story-2"))
        self.assertFalse(self.service.has_entitlement("u2", "story-1"))

    def test_expired_entitlement_is_not_active(self):
        self.service.grant_entitlement("u1", "story-1", expires_at=timezone.now() - timedelta(minutes=1))
        self.assertFalse(self.service.has_entitlement("u1", "story-1"))

    def test_regrant_renews_expired_row(self):
        self.service.grant_entitlement("u1", "story-1", expires_at=timezone.now() - timedelta(days=1))

        renewed = self.service.grant_entitlement("u1", "story-1", expires_at=timezone.now() + timedelta(days=30))

        self.assertEqual(Entitlement.objects.count(), 1)
        self.assertTrue(renewed.is_active())
        self.assertTrue(self.service.has_entitlement("u1", "story-1"))

    def test_entitlement_types_are_independent(self):
        self.service.grant_entitlement("u1", "story-1", entitlement_type="early_access")

        self.assertFalse(self.service.has_entitlement("u1", "story-1"))
        self.assertTrue(self.service.has_entitlement("u1", "story-1", "early_access"))

    def test_purchase_debits_then_grants(self):
        self.wallets.credit_coins("u1", 100, reference_type="test", reference_id="seed")

        entitlement = self.service.purchase_entitlement_with_coins("u1", "story-1", 30)

        self.assertEqual(entitlement.source, Entitlement.SOURCE_COINS)
        self.assertIsNone(entitlement.expires_at)
        self.assertEqual(self.wallets.get_balance("u1"), 70)
        self.assertTrue(
            LedgerEntry.objects.filter(
                reference_type="entitlement", reference_id="story-1", account="user_coin_wallet:u1", debit=30
            ).exists()
        )

    def test_purchase_without_funds_grants_nothing(self):
        self.wallets.credit_coins("u1", 10, reference_type="test", reference_id="seed")

        with self.assertRaises(InsufficientBalanceError):
            self.service.purchase_entitlement_with_coins("u1", "story-1", 30)

        self.assertFalse(self.service.has_entitlement("u1", "story-1"))
        self.assertEqual(self.wallets.get_balance("u1"), 10)


class EntitlementApiTests(TestCase):
    def setUp(self):
        get_services.cache_clear()
        self.user = get_user_model().objects.create_user(username="reader", password="pw")
        self.user_id = str(self.user.pk)
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def tearDown(self):
        get_services.cache_clear()

    def test_check_requires_story_id(self):
        res = self.client.get("/api/entitlements/check/")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_REQUEST")

    def test_check(self):
        get_services().entitlements.grant_entitlement(self.user_id, "story-1")

        res = self.client.get("/api/entitlements/check/", {"story_id": "story-1"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"story_id": "story-1", "entitled": True})

    def test_purchase_charges_once(self):
        get_services().wallets.credit_coins(self.user_id, 100, reference_type="test", reference_id="seed")
        payload = {"story_id": "story-1", "price_coins": 40}

        first = self.client.post("/api/entitlements/purchase/", payload, format="json")
        second = self.client.post("/api/entitlements/purchase/", payload, format="json")

        self.assertEqual(first.status_code, 200)
        self.assertFalse(first.data["already"])
        self.assertEqual(second.status_code, 200)
        self.assertTrue(second.data["already"])
        self.assertEqual(get_services().wallets.get_balance(self.user_id), 60)

    def test_purchase_without_funds_is_402(self):
        res = self.client.post(
            "/api/entitlements/purchase/", {"story_id": "story-1", "price_coins": 40}, format="json"
        )
        self.assertEqual(res.status_code, 402)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_BALANCE")

    def test_purchase_rejects_non_positive_price(self):
        res = self.client.post(
            "/api/entitlements/purchase/", {"story_id": "story-1", "price_coins": 0}, format="json"
        )
        self.assertEqual(res.status_code, 400)
