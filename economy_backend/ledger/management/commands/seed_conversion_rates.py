# ledger/management/commands/seed_conversion_rates.py

from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from ledger.models.conversion_rate import ConversionRate
from ledger.models.entry import COIN, DIAMOND, USD

DEFAULT_RATES = [
    (COIN, DIAMOND, Decimal("0.5")),
    (DIAMOND, USD, Decimal("0.005")),
]


def _rate(value: str) -> Decimal:
    try:
        rate = Decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise CommandError(f"Invalid rate: {value!r}") from exc
    if rate < 0:
        raise CommandError("Rates cannot be negative")
    return rate


class Command(BaseCommand):
    help = "Seed (or update) the COIN->DIAMOND and DIAMOND->USD conversion rates"

    def add_arguments(self, parser):
        parser.add_argument("--coin-to-diamond", dest="coin_to_diamond", help="Diamonds per coin")
        parser.add_argument("--diamond-to-usd", dest="diamond_to_usd", help="USD per diamond")

    @transaction.atomic
    def handle(self, *args, **options):
        overrides = {
            (COIN, DIAMOND): options.get("coin_to_diamond"),
            (DIAMOND, USD): options.get("diamond_to_usd"),
        }

        for from_unit, to_unit, default in DEFAULT_RATES:
            raw = overrides.get((from_unit, to_unit))
            rate = _rate(raw) if raw else default

            obj, created = ConversionRate.objects.update_or_create(
                from_unit=from_unit,
                to_unit=to_unit,
                defaults={"rate": rate},
            )
            verb = "Created" if created else "Updated"
            self.stdout.write(self.style.SUCCESS(f"{verb}: {obj}"))

        self.stdout.write(
            "Running processes pick up new rates on restart, or after RATE_CACHE_SECONDS when set."
        )
