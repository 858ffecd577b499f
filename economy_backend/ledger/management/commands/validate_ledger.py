# ledger/management/commands/validate_ledger.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db.models import Count

from ledger.models.entry import CURRENCIES
from ledger.models.transaction import LedgerTransaction
from ledger.services.balance_service import (
    find_unbalanced_transactions,
    get_currency_totals,
)


class Command(BaseCommand):
    help = "Validate ledger integrity (per-transaction and global balance, per currency)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any error is found.",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=20,
            help="Maximum number of offending transactions to print.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))
        limit = max(int(options.get("limit") or 20), 1)

        self.stdout.write(self.style.MIGRATE_HEADING("Ledger Integrity Validation"))
        self.stdout.write(f"Transactions: {LedgerTransaction.objects.count()}")
        self.stdout.write("")

        errors = 0

        # -----------------------------
        # 1) Transactions with < 2 entries
        # -----------------------------
        thin = list(
            LedgerTransaction.objects.annotate(n=Count("entries"))
            .filter(n__lt=2)
            .values_list("id", flat=True)[:limit]
        )
        if thin:
            errors += len(thin)
            self.stderr.write(self.style.ERROR(f"[FAIL] Transactions with fewer than 2 entries: {len(thin)}"))
            self.stderr.write("  Example IDs: " + ", ".join(str(t) for t in thin[:10]))
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every transaction has at least 2 entries"))

        # -----------------------------
        # 2) Per-transaction balance
        # -----------------------------
        unbalanced = find_unbalanced_transactions(limit=limit)
        if unbalanced:
            errors += len(unbalanced)
            self.stderr.write(self.style.ERROR(f"[FAIL] Unbalanced transactions: {len(unbalanced)}"))
            for row in unbalanced[:10]:
                self.stderr.write(
                    f"  tx={row['transaction_id']} {row['currency']} "
                    f"debits={row['debit']} credits={row['credit']}"
                )
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every transaction balances per currency"))

        # -----------------------------
        # 3) Global balance per currency
        # -----------------------------
        totals = get_currency_totals()
        for currency in CURRENCIES:
            debits = totals[currency]["debit"]
            credits = totals[currency]["credit"]
            if debits != credits:
                errors += 1
                self.stderr.write(self.style.ERROR(f"[FAIL] {currency} not balanced: debits={debits} credits={credits}"))
            else:
                self.stdout.write(self.style.SUCCESS(f"[OK] {currency} balanced: debits={debits} credits={credits}"))

        self.stdout.write("")
        if errors == 0:
            self.stdout.write(self.style.SUCCESS("✅ LEDGER VALIDATION PASSED"))
        else:
            self.stderr.write(self.style.ERROR(f"❌ LEDGER VALIDATION FOUND ISSUES: {errors} problem(s)"))

        return self._exit(strict and errors > 0)

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
