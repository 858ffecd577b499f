# wallets/management/commands/reconcile_wallets.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from ledger.services.balance_service import get_user_coin_balances
from wallets.models.wallet import Wallet


class Command(BaseCommand):
    help = "Compare every Wallet.coin_balance with its user_coin_wallet ledger balance."

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any drift is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))

        ledger_balances = get_user_coin_balances()
        wallets = dict(Wallet.objects.values_list("user_id", "coin_balance"))

        self.stdout.write(self.style.MIGRATE_HEADING("Wallet ↔ Ledger Reconciliation"))
        self.stdout.write(f"Wallets: {len(wallets)}  Ledger accounts: {len(ledger_balances)}")
        self.stdout.write("")

        drift = []
        for user_id in sorted(set(wallets) | set(ledger_balances)):
            cached = int(wallets.get(user_id, 0))
            authoritative = int(ledger_balances.get(user_id, 0))
            if cached != authoritative:
                drift.append((user_id, cached, authoritative))

        if drift:
            self.stderr.write(self.style.ERROR(f"[FAIL] Wallets drifting from ledger: {len(drift)}"))
            for user_id, cached, authoritative in drift[:20]:
                self.stderr.write(f"  user_id={user_id} wallet={cached} ledger={authoritative}")
        else:
            self.stdout.write(self.style.SUCCESS("✅ All wallets match the ledger"))

        if strict and drift:
            raise SystemExit(1)
