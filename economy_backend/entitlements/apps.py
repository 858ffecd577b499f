# entitlements/apps.py

from django.apps import AppConfig


class EntitlementsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "entitlements"
    verbose_name = "Content Entitlements"
