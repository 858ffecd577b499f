# gifting/tests/test_gift_service.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.core.cache import caches
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from gifting.models.gift import Gift
from gifting.models.gift_transaction import GiftTransaction
from gifting.services.exceptions import InvalidGiftError, VelocityLimitExceededError
from gifting.services.gift_service import GiftService, split_diamonds
from gifting.services.velocity_limiter import VelocityLimiter
from ledger.models.entry import COIN, DIAMOND, LedgerEntry
from ledger.services import accounts
from ledger.services.balance_service import find_unbalanced_transactions, get_account_balance
from ledger.services.exceptions import LedgerWriteError
from ledger.services.ledger_engine import LedgerEngine
from wallets.services.exceptions import InsufficientBalanceError, InvalidAmountError
from wallets.services.wallet_store import WalletStore


class SplitDiamondsTests(SimpleTestCase):
    def test_default_fee_on_fifty_diamonds(self):
        self.assertEqual(split_diamonds(50, 200_000), (40, 10))

    def test_shares_always_sum_to_total(self):
        for ppm in (0, 1, 150_000, 200_000, 333_333, 999_999, 1_000_000):
            for total in (0, 1, 7, 50, 99, 12_345):
                creator, platform = split_diamonds(total, ppm)
                self.assertEqual(creator + platform, total)
                self.assertEqual(platform, total * ppm // 1_000_000)
                self.assertGreaterEqual(creator, 0)

    def test_out_of_range_fee_rejected(self):
        with self.assertRaises(ValueError):
            split_diamonds(10, -1)
        with self.assertRaises(ValueError):
            split_diamonds(10, 1_000_001)


class GiftServiceTests(TestCase):
    """
    GUARANTEES:
    - Velocity is checked before any money moves
    - Sender debit + diamond issuance are one database transaction
    - Every ledger transaction balances per currency
    - The receipt is best-effort; the ledger is authoritative
    """

    def setUp(self):
        caches["velocity"].clear()
        self.ledger = LedgerEngine()
        self.wallets = WalletStore(ledger=self.ledger)
        self.velocity = VelocityLimiter(
            cache=caches["velocity"],
            per_second_limit=10_000,
            per_hour_limit=100_000,
        )
        self.service = GiftService(
            wallets=self.wallets,
            ledger=self.ledger,
            velocity=self.velocity,
            platform_fee_ppm=200_000,
        )
        self.star = Gift.objects.create(code="star", name="Star", price_coins=100, diamond_value=50)
        self.wallets.credit_coins("sender", 500, reference_type="test", reference_id="seed")

    def _gift_entries(self, tx_id):
        return LedgerEntry.objects.filter(transaction_id=tx_id)

    def test_send_star_splits_diamonds_and_debits_sender(self):
        result = self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        self.assertEqual(result.coins_spent, 100)
        self.assertEqual(result.diamonds_total, 50)
        self.assertEqual(result.creator_diamonds, 40)
        self.assertEqual(result.platform_diamonds, 10)
        self.assertEqual(result.sender_balance, 400)

        self.assertEqual(self.wallets.get_balance("sender"), 400)
        self.assertEqual(get_account_balance(accounts.creator_earnings("creator"), currency=DIAMOND), 40)
        self.assertEqual(get_account_balance(accounts.PLATFORM_REVENUE, currency=DIAMOND), 10)
        self.assertEqual(get_account_balance(accounts.PLATFORM_DIAMOND_ISSUANCE, currency=DIAMOND), -50)
        self.assertEqual(find_unbalanced_transactions(), [])

    def test_gift_ledger_legs(self):
        result = self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        lines = self._gift_entries(result.ledger_transaction_id)
        self.assertEqual(lines.count(), 5)
        self.assertEqual(lines.get(account=accounts.PLATFORM_COIN_LIABILITY).credit, 100)
        self.assertEqual(lines.get(account=accounts.PLATFORM_COIN_REDEMPTIONS).debit, 100)
        creator_line = lines.get(account=accounts.creator_earnings("creator"))
        self.assertEqual((creator_line.credit, creator_line.currency, creator_line.user_id), (40, DIAMOND, "creator"))
        self.assertEqual(set(lines.values_list("reference_type", flat=True)), {"gift"})

    def test_receipt_written(self):
        result = self.service.send_gift(
            sender_id="sender", creator_id="creator", gift_code="star", quantity=2, story_id="s-9"
        )

        receipt = GiftTransaction.objects.get()
        self.assertEqual(receipt.quantity, 2)
        self.assertEqual(receipt.coins_spent, 200)
        self.assertEqual(receipt.diamonds_earned, 80)
        self.assertEqual(receipt.platform_fee_ppm, 200_000)
        self.assertEqual(receipt.story_id, "s-9")
        self.assertEqual(str(receipt.ledger_transaction_id), result.ledger_transaction_id)

    def test_fractional_quantity_is_floored(self):
        result = self.service.send_gift(
            sender_id="sender", creator_id="creator", gift_code="star", quantity=Decimal("2.7")
        )
        self.assertEqual(result.quantity, 2)
        self.assertEqual(result.coins_spent, 200)

    def test_quantity_below_one_rejected(self):
        for bad in (0, Decimal("0.5"), -1, True, "abc"):
            with self.assertRaises(InvalidAmountError):
                self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star", quantity=bad)
        self.assertEqual(self.wallets.get_balance("sender"), 500)

    def test_missing_quantity_means_one(self):
        result = self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star", quantity=None)
        self.assertEqual(result.quantity, 1)

    def test_unknown_or_inactive_gift_rejected(self):
        Gift.objects.create(code="retired", name="Retired", price_coins=10, diamond_value=5, is_active=False)

        for code in ("nope", "retired"):
            with self.assertRaises(InvalidGiftError):
                self.service.send_gift(sender_id="sender", creator_id="creator", gift_code=code)

        self.assertEqual(self.wallets.get_balance("sender"), 500)

    def test_insufficient_balance_moves_nothing(self):
        with self.assertRaises(InsufficientBalanceError):
            self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star", quantity=6)

        self.assertEqual(self.wallets.get_balance("sender"), 500)
        self.assertFalse(LedgerEntry.objects.filter(reference_type="gift").exists())
        self.assertFalse(GiftTransaction.objects.exists())

    def test_velocity_checked_before_debit(self):
        self.velocity.per_second_limit = 150
        self.velocity.clock = lambda: 1_700_000_000

        self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")
        with self.assertRaises(VelocityLimitExceededError):
            self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        self.assertEqual(self.wallets.get_balance("sender"), 400)
        self.assertEqual(GiftTransaction.objects.count(), 1)

    def test_ledger_failure_rolls_back_sender_debit(self):
        original = self.ledger.record

        def fail_on_gift_legs(entries, *args, **kwargs):
            if any(e["account"] == accounts.PLATFORM_COIN_REDEMPTIONS for e in entries):
                raise LedgerWriteError("ledger unavailable")
            return original(entries, *args, **kwargs)

        with mock.patch.object(self.ledger, "record", side_effect=fail_on_gift_legs):
            with self.assertRaises(LedgerWriteError):
                self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        self.assertEqual(self.wallets.get_balance("sender"), 500)
        self.assertEqual(get_account_balance(accounts.user_coin_wallet("sender"), currency=COIN), 500)
        self.assertFalse(LedgerEntry.objects.filter(reference_type="gift").exists())
        self.assertFalse(GiftTransaction.objects.exists())

    def test_receipt_failure_does_not_undo_gift(self):
        with mock.patch.object(
            GiftTransaction.objects, "create", side_effect=DatabaseError("receipts table locked")
        ), self.assertLogs("gifting.services.gift_service", level="WARNING") as logs:
            result = self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        self.assertIn("gift receipt write failed", "\n".join(logs.output))
        self.assertEqual(self.wallets.get_balance("sender"), 400)
        self.assertTrue(LedgerEntry.objects.filter(transaction_id=result.ledger_transaction_id).exists())
        self.assertFalse(GiftTransaction.objects.exists())

    def test_zero_diamond_gift_posts_coin_legs_only(self):
        Gift.objects.create(code="wave", name="Wave", price_coins=10, diamond_value=0)

        result = self.service.send_gift(sender_id="sender", creator_id="creator", gift_code="wave")

        lines = self._gift_entries(result.ledger_transaction_id)
        self.assertEqual(set(lines.values_list("currency", flat=True)), {COIN})
        self.assertEqual(lines.count(), 2)

    def test_full_platform_fee_omits_creator_line(self):
        service = GiftService(
            wallets=self.wallets, ledger=self.ledger, velocity=self.velocity, platform_fee_ppm=1_000_000
        )
        result = service.send_gift(sender_id="sender", creator_id="creator", gift_code="star")

        self.assertEqual((result.creator_diamonds, result.platform_diamonds), (0, 50))
        lines = self._gift_entries(result.ledger_transaction_id)
        self.assertFalse(lines.filter(account=accounts.creator_earnings("creator")).exists())
        self.assertEqual(find_unbalanced_transactions(), [])

    def test_invalid_fee_configuration_rejected(self):
        with self.assertRaises(ValueError):
            GiftService(wallets=self.wallets, ledger=self.ledger, velocity=self.velocity, platform_fee_ppm=2_000_000)

    def test_list_active_orders_cheapest_first(self):
        Gift.objects.create(code="rose", name="Rose", price_coins=10, diamond_value=5)
        Gift.objects.create(code="hidden", name="Hidden", price_coins=1, diamond_value=0, is_active=False)

        codes = list(self.service.list_active().values_list("code", flat=True))
        self.assertEqual(codes, ["rose", "star"])
