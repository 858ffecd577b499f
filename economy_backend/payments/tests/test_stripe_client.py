# payments/tests/test_stripe_client.py

from __future__ import annotations

import io
import json
from unittest import mock
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs

from django.test import SimpleTestCase

from payments.services.exceptions import PaymentProcessorError
from payments.services.stripe_client import StripeClient, _flatten

SECRET = "whsec_test"
NOW = 1_700_000_000


def _response(payload: dict):
    resp = mock.MagicMock()
    resp.__enter__.return_value.read.return_value = json.dumps(payload).encode("utf-8")
    return resp


class SignatureTests(SimpleTestCase):
    def setUp(self):
        self.client = StripeClient(secret_key="sk_test", webhook_secret=SECRET, webhook_tolerance=300)
        self.body = b'{"id": "evt_1", "type": "payment_intent.succeeded"}'

    def test_valid_signature(self):
        header = StripeClient.sign(raw_body=self.body, secret=SECRET, timestamp=NOW)
        self.assertTrue(self.client.verify_signature(raw_body=self.body, header=header, now=NOW + 10))

    def test_tampered_body(self):
        header = StripeClient.sign(raw_body=self.body, secret=SECRET, timestamp=NOW)
        self.assertFalse(self.client.verify_signature(raw_body=self.body + b" ", header=header, now=NOW))

    def test_wrong_secret(self):
        header = StripeClient.sign(raw_body=self.body, secret="whsec_other", timestamp=NOW)
        self.assertFalse(self.client.verify_signature(raw_body=self.body, header=header, now=NOW))

    def test_outside_tolerance(self):
        header = StripeClient.sign(raw_body=self.body, secret=SECRET, timestamp=NOW)
        self.assertFalse(self.client.verify_signature(raw_body=self.body, header=header, now=NOW + 301))

    def test_any_matching_v1_is_accepted(self):
        good = StripeClient.sign(raw_body=self.body, secret=SECRET, timestamp=NOW).split("v1=")[1]
        header = f"t={NOW},v1=deadbeef,v1={good}"
        self.assertTrue(self.client.verify_signature(raw_body=self.body, header=header, now=NOW))

    def test_malformed_headers(self):
        for header in (None, "", "garbage", f"t={NOW}", "v1=abc", "t=notanumber,v1=abc"):
            self.assertFalse(self.client.verify_signature(raw_body=self.body, header=header, now=NOW))

    def test_unconfigured_secret_never_verifies(self):
        client = StripeClient(secret_key="sk_test")
        header = StripeClient.sign(raw_body=self.body, secret="", timestamp=NOW)
        self.assertFalse(client.verify_signature(raw_body=self.body, header=header, now=NOW))

    def test_explicit_secret_overrides_default(self):
        header = StripeClient.sign(raw_body=self.body, secret="whsec_connect", timestamp=NOW)
        self.assertTrue(
            self.client.verify_signature(raw_body=self.body, header=header, secret="whsec_connect", now=NOW)
        )


class TransportTests(SimpleTestCase):
    def setUp(self):
        self.client = StripeClient(secret_key="sk_test", api_base="https://stripe.test/")

    def test_flatten_uses_bracketed_keys(self):
        params = _flatten(
            {
                "amount": 200,
                "metadata": {"user_id": "42"},
                "capabilities": {"transfers": {"requested": True}},
                "email": None,
            }
        )
        self.assertEqual(
            params,
            [
                ("amount", "200"),
                ("metadata[user_id]", "42"),
                ("capabilities[transfers][requested]", "true"),
            ],
        )

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_create_transfer_posts_form_with_idempotency_key(self, urlopen):
        urlopen.return_value = _response({"id": "tr_1"})

        transfer = self.client.create_transfer(
            amount_cents=200, currency="USD", destination="acct_1", idempotency_key="payout:7"
        )

        self.assertEqual(transfer, {"id": "tr_1"})
        req = urlopen.call_args[0][0]
        self.assertEqual(req.full_url, "https://stripe.test/v1/transfers")
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(req.get_header("Idempotency-key"), "payout:7")
        self.assertEqual(req.get_header("Authorization"), "Bearer sk_test")
        form = parse_qs(req.data.decode("utf-8"))
        self.assertEqual(form["amount"], ["200"])
        self.assertEqual(form["currency"], ["usd"])
        self.assertEqual(form["destination"], ["acct_1"])

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_retrieve_account_is_a_get(self, urlopen):
        urlopen.return_value = _response({"id": "acct_1"})

        self.client.retrieve_account("acct_1")

        req = urlopen.call_args[0][0]
        self.assertEqual(req.get_method(), "GET")
        self.assertIsNone(req.data)
        self.assertEqual(req.full_url, "https://stripe.test/v1/accounts/acct_1")

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_http_error_carries_stripe_message(self, urlopen):
        urlopen.side_effect = HTTPError(
            "https://stripe.test/v1/transfers",
            400,
            "Bad Request",
            hdrs=None,
            fp=io.BytesIO(b'{"error": {"message": "No such destination"}}'),
        )

        with self.assertLogs("payments.services.stripe_client", level="WARNING"):
            with self.assertRaises(PaymentProcessorError) as ctx:
                self.client.create_transfer(
                    amount_cents=200, currency="usd", destination="acct_x", idempotency_key="payout:1"
                )

        self.assertIn("400 No such destination", str(ctx.exception))

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_network_error(self, urlopen):
        urlopen.side_effect = URLError("connection refused")
        with self.assertRaises(PaymentProcessorError):
            self.client.retrieve_account("acct_1")

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_non_json_response(self, urlopen):
        resp = mock.MagicMock()
        resp.__enter__.return_value.read.return_value = b"<html>gateway</html>"
        urlopen.return_value = resp

        with self.assertRaises(PaymentProcessorError):
            self.client.retrieve_account("acct_1")

    @mock.patch("payments.services.stripe_client.urlopen")
    def test_missing_secret_key_fails_before_network(self, urlopen):
        with self.assertRaises(PaymentProcessorError):
            StripeClient(secret_key="").retrieve_account("acct_1")
        urlopen.assert_not_called()
