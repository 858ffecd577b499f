# wallets/services/wallet_store.py

"""
======================================================
PATH: wallets/services/wallet_store.py
======================================================
WALLET STORE (CONCURRENCY-SAFE BALANCE MUTATION)

This module is the ONLY place allowed to change Wallet.coin_balance.

Guarantees:
- Lazy, race-safe wallet creation (a concurrent create is re-read, not raised)
- Compare-and-swap updates:
      UPDATE wallet SET coin_balance = :new
      WHERE id = :id AND coin_balance = :expected
  A lost race re-reads and retries (bounded), then CONCURRENT_UPDATE_FAILED
- Debits never drive a balance negative (checked before the CAS, and again
  by the DB check constraint)
- Every successful mutation is mirrored by a two-sided COIN ledger
  transaction against platform_coin_liability, in the SAME database
  transaction. If the ledger write fails the balance change rolls back and
  the failure is logged at CRITICAL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.utils import timezone

from ledger.models.entry import COIN
from ledger.services import accounts
from ledger.services.exceptions import LedgerError
from wallets.models.wallet import Wallet
from wallets.services.exceptions import (
    ConcurrentUpdateError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidRequestError,
)

logger = logging.getLogger(__name__)

# Retries after the first attempt
MAX_CAS_RETRIES = 3


@dataclass(frozen=True)
class WalletMutation:
    user_id: str
    balance: int
    amount: int
    transaction_id: str


def _positive_int(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"Amount must be a positive integer, got {amount!r}")
    if amount <= 0:
        raise InvalidAmountError("Amount must be positive")
    return amount


def _user_key(user_id) -> str:
    key = str(user_id or "").strip()
    if not key:
        raise InvalidRequestError("user_id is required")
    return key


class WalletStore:
    def __init__(self, *, ledger):
        self.ledger = ledger

    # ============================================================
    # READS
    # ============================================================

    def get_or_create(self, user_id) -> Wallet:
        user_id = _user_key(user_id)

        wallet = Wallet.objects.filter(user_id=user_id).first()
        if wallet is not None:
            return wallet

        try:
            with transaction.atomic():
                return Wallet.objects.create(user_id=user_id, coin_balance=0)
        except IntegrityError:
            # Lost the creation race: the other request's row is authoritative
            return Wallet.objects.get(user_id=user_id)

    def get_balance(self, user_id) -> int:
        return int(self.get_or_create(user_id).coin_balance)

    # ============================================================
    # MUTATIONS
    # ============================================================

    def credit_coins(
        self,
        user_id,
        amount,
        *,
        reference_type: str | None = None,
        reference_id: str | None = None,
        metadata: dict | None = None,
        transaction_id=None,
        description: str = "",
    ) -> WalletMutation:
        return self._mutate(
            user_id,
            _positive_int(amount),
            is_debit=False,
            reference_type=reference_type,
            reference_id=reference_id,
            metadata=metadata,
            transaction_id=transaction_id,
            description=description or "Coin credit",
        )

    def debit_coins(
        self,
        user_id,
        amount,
        *,
        reference_type: str | None = None,
        reference_id: str | None = None,
        metadata: dict | None = None,
        transaction_id=None,
        description: str = "",
    ) -> WalletMutation:
        return self._mutate(
            user_id,
            _positive_int(amount),
            is_debit=True,
            reference_type=reference_type,
            reference_id=reference_id,
            metadata=metadata,
            transaction_id=transaction_id,
            description=description or "Coin debit",
        )

    # ============================================================
    # INTERNALS
    # ============================================================

    def _compare_and_swap(self, wallet: Wallet, expected: int, new_balance: int) -> bool:
        updated = Wallet.objects.filter(pk=wallet.pk, coin_balance=expected).update(
            coin_balance=new_balance,
            updated_at=timezone.now(),
        )
        return updated == 1

    def _apply_delta(self, user_id: str, amount: int, *, is_debit: bool) -> int:
        for attempt in range(MAX_CAS_RETRIES + 1):
            wallet = self.get_or_create(user_id)
            expected = int(wallet.coin_balance)

            if is_debit and expected < amount:
                raise InsufficientBalanceError(
                    "Insufficient coin balance",
                    user_id=user_id,
                    balance=expected,
                    amount=amount,
                )

            new_balance = expected - amount if is_debit else expected + amount
            if self._compare_and_swap(wallet, expected, new_balance):
                return new_balance

            logger.info(
                "wallet CAS lost race, retrying",
                extra={"user_id": user_id, "attempt": attempt + 1},
            )

        logger.warning(
            "wallet CAS retries exhausted",
            extra={"user_id": user_id, "amount": amount, "is_debit": is_debit},
        )
        raise ConcurrentUpdateError(
            "Concurrent wallet update failed", user_id=user_id
        )

    def _mutate(
        self,
        user_id,
        amount: int,
        *,
        is_debit: bool,
        reference_type,
        reference_id,
        metadata,
        transaction_id,
        description: str,
    ) -> WalletMutation:
        user_id = _user_key(user_id)

        user_account = accounts.user_coin_wallet(user_id)
        common = {
            "currency": COIN,
            "reference_type": reference_type,
            "reference_id": reference_id,
            "metadata": metadata,
        }
        if is_debit:
            entries = [
                {"account": user_account, "user_id": user_id, "debit": amount, **common},
                {"account": accounts.PLATFORM_COIN_LIABILITY, "credit": amount, **common},
            ]
        else:
            entries = [
                {"account": user_account, "user_id": user_id, "credit": amount, **common},
                {"account": accounts.PLATFORM_COIN_LIABILITY, "debit": amount, **common},
            ]

        with transaction.atomic():
            new_balance = self._apply_delta(user_id, amount, is_debit=is_debit)

            try:
                tx_id = self.ledger.record(
                    entries, transaction_id, description=description
                )
            except LedgerError:
                logger.critical(
                    "ledger write failed after wallet mutation; rolling back",
                    extra={
                        "user_id": user_id,
                        "amount": amount,
                        "is_debit": is_debit,
                        "reference_type": reference_type,
                        "reference_id": reference_id,
                    },
                )
                raise

        logger.info(
            "wallet debited" if is_debit else "wallet credited",
            extra={"user_id": user_id, "amount": amount, "balance": new_balance},
        )
        return WalletMutation(
            user_id=user_id,
            balance=new_balance,
            amount=amount,
            transaction_id=tx_id,
        )
