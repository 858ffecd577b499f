# gifting/management/commands/seed_gifts.py

from django.core.management.base import BaseCommand
from django.db import transaction

from gifting.models.gift import Gift

GIFTS = [
    # (code, name, price_coins, diamond_value)
    ("rose", "Rose", 1, 0),
    ("heart", "Heart", 10, 5),
    ("star", "Star", 100, 50),
    ("crown", "Crown", 500, 250),
    ("rocket", "Rocket", 2000, 1000),
]


class Command(BaseCommand):
    help = "Seed the default gift catalogue (idempotent)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding gift catalogue...")

        created_count = 0
        for code, name, price_coins, diamond_value in GIFTS:
            _, created = Gift.objects.update_or_create(
                code=code,
                defaults={
                    "name": name,
                    "price_coins": price_coins,
                    "diamond_value": diamond_value,
                    "is_active": True,
                },
            )
            created_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(f"✅ Gifts ready: {len(GIFTS)} ({created_count} new)")
        )
