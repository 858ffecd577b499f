# wallets/tests/test_wallet_store.py

from __future__ import annotations

import threading
import unittest
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import IntegrityError, connection
from django.test import TestCase, TransactionTestCase

from ledger.models.entry import LedgerEntry
from ledger.services.balance_service import get_account_balance
from ledger.services.exceptions import LedgerWriteError
from ledger.services.ledger_engine import LedgerEngine
from wallets.models.wallet import Wallet
from wallets.services.exceptions import (
    ConcurrentUpdateError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidRequestError,
)
from wallets.services.wallet_store import MAX_CAS_RETRIES, WalletStore


class WalletStoreTests(TestCase):
    """
    GUARANTEES:
    - Balances never go negative
    - Every mutation is mirrored in the ledger (same DB transaction)
    - Lost CAS races retry, then fail with CONCURRENT_UPDATE_FAILED
    """

    def setUp(self):
        self.store = WalletStore(ledger=LedgerEngine())

    # =====================================================
    # CREATION
    # =====================================================

    def test_get_or_create_is_lazy_and_idempotent(self):
        self.assertFalse(Wallet.objects.filter(user_id="u1").exists())

        first = self.store.get_or_create("u1")
        second = self.store.get_or_create("u1")

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.coin_balance, 0)
        self.assertEqual(Wallet.objects.filter(user_id="u1").count(), 1)

    def test_get_or_create_rereads_after_losing_creation_race(self):
        existing = Wallet.objects.create(user_id="u1", coin_balance=7)

        with mock.patch.object(Wallet.objects, "filter") as filter_mock, mock.patch.object(
            Wallet.objects, "create", side_effect=IntegrityError("duplicate user_id")
        ):
            filter_mock.return_value.first.return_value = None
            wallet = self.store.get_or_create("u1")

        self.assertEqual(wallet.pk, existing.pk)
        self.assertEqual(wallet.coin_balance, 7)

    # =====================================================
    # CREDIT / DEBIT
    # =====================================================

    def test_credit_500_coins_to_new_user(self):
        result = self.store.credit_coins("u1", 500, reference_type="test", reference_id="t1")

        self.assertEqual(result.balance, 500)
        self.assertEqual(self.store.get_balance("u1"), 500)

        lines = LedgerEntry.objects.filter(transaction_id=result.transaction_id)
        self.assertEqual(lines.count(), 2)
        user_line = lines.get(account="user_coin_wallet:u1")
        platform_line = lines.get(account="platform_coin_liability")
        self.assertEqual((user_line.credit, user_line.debit), (500, 0))
        self.assertEqual((platform_line.debit, platform_line.credit), (500, 0))
        self.assertEqual(user_line.user_id, "u1")

    def test_debit_reduces_balance_and_records_reverse_legs(self):
        self.store.credit_coins("u1", 100)
        result = self.store.debit_coins("u1", 30)

        self.assertEqual(result.balance, 70)
        lines = LedgerEntry.objects.filter(transaction_id=result.transaction_id)
        self.assertEqual(lines.get(account="user_coin_wallet:u1").debit, 30)
        self.assertEqual(lines.get(account="platform_coin_liability").credit, 30)

        # wallet cache matches ledger
        self.assertEqual(get_account_balance("user_coin_wallet:u1"), 70)

    def test_debit_more_than_balance_raises_and_writes_nothing(self):
        self.store.credit_coins("u1", 10)
        entries_before = LedgerEntry.objects.count()

        with self.assertRaises(InsufficientBalanceError):
            self.store.debit_coins("u1", 11)

        self.assertEqual(self.store.get_balance("u1"), 10)
        self.assertEqual(LedgerEntry.objects.count(), entries_before)

    def test_debit_exact_balance_reaches_zero(self):
        self.store.credit_coins("u1", 10)
        self.assertEqual(self.store.debit_coins("u1", 10).balance, 0)

    def test_invalid_amounts_rejected(self):
        for amount in (0, -5, 1.5, "10", None, True):
            with self.subTest(amount=amount):
                with self.assertRaises(InvalidAmountError):
                    self.store.credit_coins("u1", amount)
                with self.assertRaises(InvalidAmountError):
                    self.store.debit_coins("u1", amount)

    def test_missing_user_id_is_invalid_request(self):
        for user_id in ("", "   ", None):
            with self.subTest(user_id=user_id):
                with self.assertRaises(InvalidRequestError) as ctx:
                    self.store.credit_coins(user_id, 10)
                self.assertEqual(ctx.exception.code, "INVALID_REQUEST")
        self.assertFalse(Wallet.objects.exists())

    # =====================================================
    # COMPARE-AND-SWAP RACES
    # =====================================================

    def test_lost_race_is_retried_against_fresh_balance(self):
        self.store.credit_coins("u1", 100)
        real_cas = WalletStore._compare_and_swap
        calls = {"n": 0}

        def racing_cas(store, wallet, expected, new_balance):
            calls["n"] += 1
            if calls["n"] == 1:
                # another writer lands first
                Wallet.objects.filter(pk=wallet.pk).update(coin_balance=expected + 10)
                return False
            return real_cas(store, wallet, expected, new_balance)

        with mock.patch.object(WalletStore, "_compare_and_swap", autospec=True, side_effect=racing_cas):
            result = self.store.debit_coins("u1", 30)

        self.assertEqual(calls["n"], 2)
        self.assertEqual(result.balance, 80)
        self.assertEqual(Wallet.objects.get(user_id="u1").coin_balance, 80)

    def test_retry_rechecks_balance_after_concurrent_drain(self):
        self.store.credit_coins("u1", 50)

        def draining_cas(store, wallet, expected, new_balance):
            Wallet.objects.filter(pk=wallet.pk).update(coin_balance=0)
            return False

        with mock.patch.object(WalletStore, "_compare_and_swap", autospec=True, side_effect=draining_cas):
            with self.assertRaises(InsufficientBalanceError):
                self.store.debit_coins("u1", 30)

    def test_competing_full_debits_exactly_one_succeeds(self):
        self.store.credit_coins("u1", 100)
        real_cas = WalletStore._compare_and_swap
        calls = {"n": 0}

        def interleaved_cas(store, wallet, expected, new_balance):
            calls["n"] += 1
            if calls["n"] == 1:
                # the competing debit(100) lands between our read and our swap
                store.debit_coins("u1", 100, reference_type="gift", reference_id="other")
            return real_cas(store, wallet, expected, new_balance)

        with mock.patch.object(WalletStore, "_compare_and_swap", autospec=True, side_effect=interleaved_cas):
            with self.assertRaises(InsufficientBalanceError):
                self.store.debit_coins("u1", 100, reference_type="gift", reference_id="mine")

        self.assertEqual(self.store.get_balance("u1"), 0)
        self.assertEqual(get_account_balance("user_coin_wallet:u1"), 0)
        self.assertEqual(LedgerEntry.objects.filter(reference_type="gift").count(), 2)
        self.assertFalse(LedgerEntry.objects.filter(reference_id="mine").exists())

    def test_retries_exhausted_raises_concurrent_update(self):
        self.store.credit_coins("u1", 100)
        entries_before = LedgerEntry.objects.count()

        with mock.patch.object(WalletStore, "_compare_and_swap", return_value=False) as cas:
            with self.assertRaises(ConcurrentUpdateError):
                self.store.debit_coins("u1", 10)

        self.assertEqual(cas.call_count, MAX_CAS_RETRIES + 1)
        self.assertEqual(self.store.get_balance("u1"), 100)
        self.assertEqual(LedgerEntry.objects.count(), entries_before)

    # =====================================================
    # LEDGER COUPLING
    # =====================================================

    def test_ledger_failure_rolls_back_balance_and_logs_critical(self):
        self.store.credit_coins("u1", 100)

        with mock.patch.object(
            self.store.ledger, "record", side_effect=LedgerWriteError("db down")
        ):
            with self.assertLogs("wallets.services.wallet_store", level="CRITICAL"):
                with self.assertRaises(LedgerWriteError):
                    self.store.debit_coins("u1", 40)

        self.assertEqual(self.store.get_balance("u1"), 100)


class ReconcileWalletsCommandTests(TestCase):
    def setUp(self):
        self.store = WalletStore(ledger=LedgerEngine())
        self.store.credit_coins("u1", 40)
        self.store.credit_coins("u2", 60)

    def test_matching_wallets_pass(self):
        out = StringIO()
        call_command("reconcile_wallets", "--strict", stdout=out, stderr=StringIO())
        self.assertIn("All wallets match", out.getvalue())

    def test_drift_fails_strict(self):
        Wallet.objects.filter(user_id="u2").update(coin_balance=61)
        err = StringIO()
        with self.assertRaises(SystemExit):
            call_command("reconcile_wallets", "--strict", stdout=StringIO(), stderr=err)
        self.assertIn("user_id=u2", err.getvalue())


@unittest.skipIf(connection.vendor == "sqlite", "needs row-level concurrency (Postgres)")
class ConcurrentDebitTests(TransactionTestCase):
    """
    Real threads against a real database: N debits against a balance of B
    succeed exactly min(N, B) times and never overdraw.
    """

    def _race(self, store, user_id, amount, workers):
        outcomes = []
        lock = threading.Lock()
        barrier = threading.Barrier(workers)

        def worker():
            try:
                barrier.wait()
                store.debit_coins(user_id, amount)
                result = "ok"
            except (InsufficientBalanceError, ConcurrentUpdateError) as exc:
                result = exc.code
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return outcomes

    def test_parallel_debits_succeed_exactly_up_to_balance(self):
        store = WalletStore(ledger=LedgerEngine())
        store.credit_coins("hot", 5)

        outcomes = self._race(store, "hot", 1, workers=10)

        self.assertEqual(outcomes.count("ok"), min(10, 5))
        self.assertEqual(len(outcomes), 10)
        self.assertEqual(store.get_balance("hot"), 0)
        self.assertEqual(get_account_balance("user_coin_wallet:hot"), 0)

    def test_two_full_debits_one_wins(self):
        store = WalletStore(ledger=LedgerEngine())
        store.credit_coins("pair", 100)

        outcomes = self._race(store, "pair", 100, workers=2)

        self.assertEqual(sorted(outcomes), ["INSUFFICIENT_BALANCE", "ok"])
        self.assertEqual(store.get_balance("pair"), 0)
        self.assertEqual(get_account_balance("user_coin_wallet:pair"), 0)
