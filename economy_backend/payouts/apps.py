# payouts/apps.py

"""
PAYOUTS APP CONFIG

Creator earnings (diamonds), payout requests, admin approval and the
Stripe Connect account each creator is paid through.
"""

from django.apps import AppConfig


class PayoutsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payouts"
    verbose_name = "Creator Payouts"
