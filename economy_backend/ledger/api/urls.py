# ledger/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from ledger.api.views import LedgerEntryViewSet, LedgerTransactionViewSet

router = DefaultRouter()
router.register("transactions", LedgerTransactionViewSet, basename="ledger-transaction")
router.register("entries", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    path("", include(router.urls)),
]
