# wallets/apps.py

"""
WALLETS APP CONFIG

Per-user coin wallet: a materialised cache of user_coin_wallet:{user_id}.
Mutated ONLY through wallets.services.wallet_store (compare-and-swap).
"""

from django.apps import AppConfig


class WalletsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "wallets"
    verbose_name = "Coin Wallets"
