# payments/urls.py

from django.urls import path

from payments.views.coins import CoinPurchaseIntentView
from payments.views.webhooks import StripeConnectWebhookView, StripePaymentsWebhookView

urlpatterns = [
    path("coins/intent/", CoinPurchaseIntentView.as_view(), name="coin-purchase-intent"),
    path("webhooks/stripe/", StripePaymentsWebhookView.as_view(), name="stripe-webhook"),
    path("webhooks/stripe-connect/", StripeConnectWebhookView.as_view(), name="stripe-connect-webhook"),
]
