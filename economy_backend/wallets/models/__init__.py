# wallets/models/__init__.py

from wallets.models.wallet import Wallet

__all__ = ["Wallet"]
