# wallets/api/urls.py

from django.urls import path

from wallets.api.views import WalletView

urlpatterns = [
    path("", WalletView.as_view(), name="wallet"),
]
