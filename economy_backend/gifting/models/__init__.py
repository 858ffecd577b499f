# gifting/models/__init__.py

from gifting.models.gift import Gift
from gifting.models.gift_transaction import GiftTransaction

__all__ = ["Gift", "GiftTransaction"]
