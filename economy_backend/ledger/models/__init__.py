# ledger/models/__init__.py

"""
LEDGER MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from ledger.models.conversion_rate import ConversionRate
from ledger.models.entry import LedgerEntry
from ledger.models.transaction import LedgerTransaction

__all__ = [
    "LedgerTransaction",
    "LedgerEntry",
    "ConversionRate",
]
