# ledger/tests/test_ledger_api.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase
from rest_framework.test import APIClient

from ledger.services import accounts
from ledger.services.ledger_engine import LedgerEngine
from payouts.tests.test_earnings_service import earn


class LedgerApiPermissionTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.plain = User.objects.create_user(username="plain", password="pw")
        auditor = User.objects.create_user(username="auditor", password="pw")
        auditor.user_permissions.add(
            Permission.objects.get(codename="view_ledgerentry"),
            Permission.objects.get(codename="view_ledgertransaction"),
        )
        # reload to drop the cached permission set
        self.auditor = User.objects.get(pk=auditor.pk)

        earn(LedgerEngine(), "c1", 40)
        earn(LedgerEngine(), "c2", 60)

    def _client(self, user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_anonymous_rejected(self):
        self.assertEqual(APIClient().get("/api/ledger/entries/").status_code, 401)

    def test_user_without_permission_forbidden(self):
        client = self._client(self.plain)
        self.assertEqual(client.get("/api/ledger/entries/").status_code, 403)
        self.assertEqual(client.get("/api/ledger/transactions/").status_code, 403)

    def test_auditor_can_filter_entries_by_account(self):
        res = self._client(self.auditor).get(
            "/api/ledger/entries/", {"account": accounts.creator_earnings("c1")}
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["credit"], 40)

    def test_transactions_embed_entries(self):
        res = self._client(self.auditor).get("/api/ledger/transactions/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 2)
        self.assertTrue(all(len(tx["entries"]) >= 2 for tx in res.data["results"]))

    def test_ledger_is_read_only(self):
        res = self._client(self.auditor).post("/api/ledger/entries/", {}, format="json")
        self.assertEqual(res.status_code, 405)


class HealthCheckTests(TestCase):
    def test_health_ok(self):
        res = APIClient().get("/api/health/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})

    def test_api_root_lists_modules(self):
        res = APIClient().get("/api/")
        self.assertEqual(res.status_code, 200)
        self.assertIn("wallet", res.data["modules"])
