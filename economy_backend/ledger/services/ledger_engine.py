# ledger/services/ledger_engine.py

"""
======================================================
PATH: ledger/services/ledger_engine.py
======================================================
LEDGER ENGINE (DOUBLE-ENTRY CHOKE-POINT)

This module is the ONLY place allowed to:
- Create LedgerTransaction
- Create LedgerEntry
- Enforce debits == credits (per currency)
- Guarantee insert atomicity
- Enforce idempotency via idempotency_key / transaction id

Wallets, gifting, payouts and coin purchases must all pass through here.

Entry shape (dict):
    {
        "account": "user_coin_wallet:42",   # required, non-empty
        "debit": 0,                         # non-negative int
        "credit": 100,                      # non-negative int
        "currency": "COIN",                 # COIN | DIAMOND | USD (default COIN)
        "user_id": "42",                    # optional
        "reference_type": "gift",           # optional
        "reference_id": "rose",             # optional
        "metadata": {...},                  # optional JSON
    }

Callers running inside their own transaction.atomic() block get the ledger
write in the same database transaction: if the caller rolls back, so does
the ledger.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from django.db import DatabaseError, IntegrityError, transaction

from ledger.models.entry import COIN, CURRENCIES, LedgerEntry
from ledger.models.transaction import LedgerTransaction
from ledger.services.exceptions import (
    LedgerIdempotencyError,
    LedgerImbalanceError,
    LedgerInvalidEntryError,
    LedgerWriteError,
)

logger = logging.getLogger(__name__)

MIN_ENTRIES = 2


def _amount(value, *, field: str) -> int:
    if value is None:
        return 0

    # bool is an int subclass; floats are rejected outright (no silent rounding)
    if isinstance(value, bool) or not isinstance(value, int):
        raise LedgerInvalidEntryError(
            f"{field} must be an integer amount in minor units, got {value!r}"
        )

    if value < 0:
        raise LedgerInvalidEntryError(f"{field} cannot be negative")

    return value


def _optional_str(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_entry(line) -> dict:
    if not isinstance(line, dict):
        raise LedgerInvalidEntryError("Each entry must be an object/dict")

    account = _optional_str(line.get("account"))
    if not account:
        raise LedgerInvalidEntryError("Entry missing account")

    debit = _amount(line.get("debit"), field="debit")
    credit = _amount(line.get("credit"), field="credit")

    if debit > 0 and credit > 0:
        raise LedgerInvalidEntryError("An entry cannot have both debit and credit")

    if debit == 0 and credit == 0:
        raise LedgerInvalidEntryError("An entry must have either debit or credit")

    currency = line.get("currency") or COIN
    if currency not in CURRENCIES:
        raise LedgerInvalidEntryError(f"Unsupported currency: {currency!r}")

    metadata = line.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise LedgerInvalidEntryError("Entry metadata must be an object/dict")

    return {
        "account": account,
        "debit": debit,
        "credit": credit,
        "currency": currency,
        "user_id": _optional_str(line.get("user_id")),
        "reference_type": _optional_str(line.get("reference_type")),
        "reference_id": _optional_str(line.get("reference_id")),
        "metadata": metadata,
    }


def validate_entries(entries) -> list[dict]:
    """
    Normalize and validate a candidate transaction without writing anything.

    Returns the normalized entries or raises LedgerInvalidEntryError /
    LedgerImbalanceError.
    """
    if not entries or len(entries) < MIN_ENTRIES:
        raise LedgerInvalidEntryError(
            f"A ledger transaction needs at least {MIN_ENTRIES} entries"
        )

    normalized = [_normalize_entry(line) for line in entries]

    debits: dict[str, int] = defaultdict(int)
    credits: dict[str, int] = defaultdict(int)
    for line in normalized:
        debits[line["currency"]] += line["debit"]
        credits[line["currency"]] += line["credit"]

    for currency in sorted(set(debits) | set(credits)):
        if debits[currency] != credits[currency]:
            raise LedgerImbalanceError(
                f"Ledger transaction not balanced for {currency}: "
                f"debits={debits[currency]} credits={credits[currency]}",
                currency=currency,
                debits=debits[currency],
                credits=credits[currency],
            )

    return normalized


def _coerce_transaction_id(transaction_id) -> uuid.UUID:
    if transaction_id is None:
        return uuid.uuid4()
    if isinstance(transaction_id, uuid.UUID):
        return transaction_id
    try:
        return uuid.UUID(str(transaction_id))
    except (TypeError, ValueError) as exc:
        raise LedgerInvalidEntryError(
            f"Invalid transaction id: {transaction_id!r}"
        ) from exc


class LedgerEngine:
    """
    Append-only double-entry writer.

    Stateless; one instance is shared through backend.container.
    """

    def record(
        self,
        entries,
        transaction_id=None,
        *,
        description: str = "",
        idempotency_key: str | None = None,
    ) -> str:
        normalized = validate_entries(entries)
        tx_id = _coerce_transaction_id(transaction_id)
        idempotency_key = _optional_str(idempotency_key)
        description = (description or "").strip()[:255]

        # Clear error before DB constraint race handling
        if idempotency_key and LedgerTransaction.objects.filter(
            idempotency_key=idempotency_key
        ).exists():
            raise LedgerIdempotencyError(
                f"Ledger transaction already exists for key {idempotency_key}",
                idempotency_key=idempotency_key,
            )

        try:
            with transaction.atomic():
                header = LedgerTransaction.objects.create(
                    id=tx_id,
                    idempotency_key=idempotency_key,
                    description=description,
                )
                LedgerEntry.objects.bulk_create(
                    [LedgerEntry(transaction=header, **line) for line in normalized]
                )
        except IntegrityError as exc:
            if self._is_duplicate(tx_id, idempotency_key):
                raise LedgerIdempotencyError(
                    f"Ledger transaction already exists ({idempotency_key or tx_id})",
                    idempotency_key=idempotency_key,
                ) from exc
            self._log_write_failure(tx_id, normalized, exc)
            raise LedgerWriteError(f"Failed to write ledger transaction: {exc}") from exc
        except DatabaseError as exc:
            self._log_write_failure(tx_id, normalized, exc)
            raise LedgerWriteError(f"Failed to write ledger transaction: {exc}") from exc

        logger.info(
            "ledger transaction recorded",
            extra={
                "transaction_id": str(tx_id),
                "idempotency_key": idempotency_key,
                "entries": len(normalized),
            },
        )
        return str(tx_id)

    @staticmethod
    def _is_duplicate(tx_id, idempotency_key) -> bool:
        if idempotency_key and LedgerTransaction.objects.filter(
            idempotency_key=idempotency_key
        ).exists():
            return True
        return LedgerTransaction.objects.filter(pk=tx_id).exists()

    @staticmethod
    def _log_write_failure(tx_id, normalized, exc) -> None:
        logger.critical(
            "ledger write failed",
            extra={
                "transaction_id": str(tx_id),
                "accounts": [line["account"] for line in normalized],
                "error": str(exc),
            },
        )
