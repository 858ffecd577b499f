# payments/apps.py

"""
PAYMENTS APP CONFIG

Stripe boundary:
- Coin purchases (payment intents + payment webhooks)
- Connect webhooks (transfer / account status)
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments (Stripe)"
