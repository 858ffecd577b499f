# payments/tests/test_coin_purchase_service.py

from __future__ import annotations

from unittest import mock

from django.test import TestCase

from ledger.models.entry import USD, LedgerEntry
from ledger.services import accounts
from ledger.services.balance_service import find_unbalanced_transactions, get_account_balance
from ledger.services.ledger_engine import LedgerEngine
from payments.models.coin_purchase import CoinPurchase
from payments.services.coin_purchase_service import CoinPurchaseService
from payments.services.exceptions import PaymentProcessorError
from wallets.services.exceptions import InvalidAmountError
from wallets.services.wallet_store import WalletStore


def intent(payment_id="pi_1", *, user_id="u1", coins="1000", amount=990, currency="usd"):
    return {
        "id": payment_id,
        "amount": amount,
        "amount_received": amount,
        "currency": currency,
        "metadata": {"user_id": user_id, "amount_coins": coins},
    }


class CoinPurchaseServiceTests(TestCase):
    def setUp(self):
        self.ledger = LedgerEngine()
        self.wallets = WalletStore(ledger=self.ledger)
        self.stripe = mock.Mock()
        self.stripe.create_payment_intent.return_value = {"id": "pi_1", "client_secret": "pi_1_secret"}
        self.service = CoinPurchaseService(
            wallets=self.wallets, ledger=self.ledger, stripe=self.stripe, cents_per_100_coins=99
        )

    # =====================================================
    # INTENTS
    # =====================================================

    def test_price_rounds_up_to_whole_cents(self):
        self.assertEqual(self.service.price_cents(100), 99)
        self.assertEqual(self.service.price_cents(1000), 990)
        self.assertEqual(self.service.price_cents(51), 51)

    def test_create_intent(self):
        result = self.service.create_purchase_intent("u1", 1000)

        self.assertEqual(
            result,
            {"client_secret": "pi_1_secret", "intent_id": "pi_1", "amount_cents": 990, "amount_coins": 1000},
        )
        self.stripe.create_payment_intent.assert_called_once_with(
            amount_cents=990, currency=USD, metadata={"user_id": "u1", "amount_coins": "1000"}
        )

    def test_intent_below_processor_minimum(self):
        with self.assertRaises(InvalidAmountError):
            self.service.create_purchase_intent("u1", 10)
        self.stripe.create_payment_intent.assert_not_called()

    def test_intent_rejects_non_integer_amounts(self):
        for bad in (0, -100, 10.5, True, "100"):
            with self.assertRaises(InvalidAmountError):
                self.service.create_purchase_intent("u1", bad)

    # =====================================================
    # PAYMENT SUCCEEDED
    # =====================================================

    def test_payment_credits_wallet_and_books_cash(self):
        purchase = self.service.handle_payment_succeeded(intent())

        self.assertEqual(purchase.coins_credited, 1000)
        self.assertEqual(purchase.amount, 990)
        self.assertEqual(self.wallets.get_balance("u1"), 1000)
        self.assertEqual(get_account_balance(accounts.PLATFORM_COIN_SALES, currency=USD), 990)
        self.assertEqual(get_account_balance(accounts.PLATFORM_CASH, currency=USD), -990)
        self.assertEqual(find_unbalanced_transactions(), [])

    def test_replayed_payment_credits_once(self):
        self.service.handle_payment_succeeded(intent())
        self.assertIsNone(self.service.handle_payment_succeeded(intent()))

        self.assertEqual(self.wallets.get_balance("u1"), 1000)
        self.assertEqual(CoinPurchase.objects.count(), 1)
        self.assertEqual(LedgerEntry.objects.filter(reference_type="psp", currency=USD).count(), 2)

    def test_payment_without_coin_metadata_is_ignored(self):
        payload = intent()
        payload["metadata"] = {}

        self.assertIsNone(self.service.handle_payment_succeeded(payload))
        self.assertFalse(CoinPurchase.objects.exists())

    def test_non_usd_payment_rejected(self):
        with self.assertRaises(PaymentProcessorError):
            self.service.handle_payment_succeeded(intent(currency="eur"))
        self.assertEqual(self.wallets.get_balance("u1"), 0)

    # =====================================================
    # REFUNDS / DISPUTES
    # =====================================================

    def test_full_refund_reverses_unspent_coins(self):
        self.service.handle_payment_succeeded(intent())

        purchase = self.service.handle_charge_refunded(
            {"payment_intent": "pi_1", "amount_refunded": 990, "currency": "usd"}
        )

        self.assertEqual(purchase.status, CoinPurchase.STATUS_REFUNDED)
        self.assertEqual((purchase.refunded_coins, purchase.refunded_amount), (1000, 990))
        self.assertEqual(self.wallets.get_balance("u1"), 0)
        self.assertEqual(get_account_balance(accounts.PLATFORM_REFUND_EXPENSE, currency=USD), -990)
        self.assertEqual(find_unbalanced_transactions(), [])

    def test_refund_never_drives_wallet_negative(self):
        self.service.handle_payment_succeeded(intent())
        self.wallets.debit_coins("u1", 300, reference_type="gift", reference_id="1")

        with self.assertLogs("payments.services.coin_purchase_service", level="WARNING") as logs:
            purchase = self.service.handle_charge_refunded(
                {"payment_intent": {"id": "pi_1"}, "amount_refunded": 990, "currency": "usd"}
            )

        self.assertIn("refunded coins already spent", "\n".join(logs.output))
        self.assertEqual(purchase.refunded_coins, 700)
        self.assertEqual(self.wallets.get_balance("u1"), 0)

    def test_partial_refunds_book_only_the_delta(self):
        self.service.handle_payment_succeeded(intent())

        self.service.handle_charge_refunded({"payment_intent": "pi_1", "amount_refunded": 400, "currency": "usd"})
        self.service.handle_charge_refunded({"payment_intent": "pi_1", "amount_refunded": 990, "currency": "usd"})
        self.service.handle_charge_refunded({"payment_intent": "pi_1", "amount_refunded": 990, "currency": "usd"})

        self.assertEqual(get_account_balance(accounts.PLATFORM_REFUND_EXPENSE, currency=USD), -990)
        self.assertEqual(CoinPurchase.objects.get().refunded_amount, 990)

    def test_refund_for_unknown_payment(self):
        with self.assertLogs("payments.services.coin_purchase_service", level="WARNING"):
            result = self.service.handle_charge_refunded(
                {"payment_intent": "pi_missing", "amount_refunded": 100, "currency": "usd"}
            )
        self.assertIsNone(result)

    def test_dispute_reserves_funds_once(self):
        dispute = {"id": "dp_1", "amount": 990, "currency": "usd", "payment_intent": "pi_1"}

        tx_id = self.service.handle_dispute_created(dispute)
        replay = self.service.handle_dispute_created(dispute)

        self.assertIsNotNone(tx_id)
        self.assertIsNone(replay)
        self.assertEqual(get_account_balance(accounts.PLATFORM_DISPUTE_RESERVE, currency=USD), -990)
