# entitlements/models/__init__.py

from entitlements.models.entitlement import Entitlement

__all__ = ["Entitlement"]
