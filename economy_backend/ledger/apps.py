# ledger/apps.py

"""
LEDGER APP CONFIG

Double-entry ledger for the creator economy:
- Append-only transactions + entries (COIN / DIAMOND / USD)
- Conversion rate table
- Integrity reports (validate_ledger)
"""

from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"
    verbose_name = "Ledger"
