# gifting/apps.py

"""
GIFTING APP CONFIG

Gift catalogue + the send-gift pipeline:
velocity check -> wallet debit -> diamond split -> ledger -> receipt.
"""

from django.apps import AppConfig


class GiftingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "gifting"
    verbose_name = "Gifting"
