# entitlements/api/urls.py

from django.urls import path

from entitlements.api.views import EntitlementCheckView, EntitlementPurchaseView

urlpatterns = [
    path("check/", EntitlementCheckView.as_view(), name="entitlement-check"),
    path("purchase/", EntitlementPurchaseView.as_view(), name="entitlement-purchase"),
]
