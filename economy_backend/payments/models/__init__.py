# payments/models/__init__.py

from payments.models.coin_purchase import CoinPurchase

__all__ = ["CoinPurchase"]
