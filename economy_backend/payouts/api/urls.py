# payouts/api/urls.py

from django.urls import path

from payouts.api.views import (
    ApprovePayoutView,
    ConnectOnboardingView,
    ConnectStatusView,
    EarningsSummaryView,
    MonetizationOverviewView,
    PayoutRequestView,
    PendingPayoutsView,
)

creator_urlpatterns = [
    path("earnings/summary/", EarningsSummaryView.as_view(), name="creator-earnings-summary"),
    path("payouts/request/", PayoutRequestView.as_view(), name="creator-payout-request"),
    path("monetization/", MonetizationOverviewView.as_view(), name="creator-monetization"),
]

connect_urlpatterns = [
    path("onboarding/", ConnectOnboardingView.as_view(), name="connect-onboarding"),
    path("status/", ConnectStatusView.as_view(), name="connect-status"),
]

admin_urlpatterns = [
    path("pending/", PendingPayoutsView.as_view(), name="admin-payouts-pending"),
    path("<int:payout_id>/approve/", ApprovePayoutView.as_view(), name="admin-payout-approve"),
]
