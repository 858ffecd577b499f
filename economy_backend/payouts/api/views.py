# payouts/api/views.py

"""
CREATOR PAYOUT API VIEWS

Creator (IsAuthenticated, acting on their own id):
- GET  /api/creator/earnings/summary/
- POST /api/creator/payouts/request/
- GET  /api/creator/monetization/
- POST /api/connect/onboarding/
- GET  /api/connect/status/

Staff (IsAdminUser):
- GET  /api/admin/payouts/pending/
- POST /api/admin/payouts/<id>/approve/
"""

from __future__ import annotations

from django.db.models import Sum
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.container import get_services
from common.auth import request_user_id
from common.exceptions import MonetizationError
from common.responses import error_response, monetization_error_response
from gifting.models.gift_transaction import GiftTransaction
from payouts.api.serializers import OnboardingInputSerializer, PayoutSerializer

RECENT_GIFTS_LIMIT = 50


# =====================================================
# CREATOR
# =====================================================


class EarningsSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["creator"], responses={200: dict})
    def get(self, request):
        try:
            summary = get_services().earnings.get_summary(request_user_id(request))
        except MonetizationError as exc:
            return monetization_error_response(exc)
        return Response(summary)


class PayoutRequestView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["creator"], request=None, responses={201: dict})
    def post(self, request):
        try:
            payout_id = get_services().earnings.request_payout(request_user_id(request))
        except MonetizationError as exc:
            return monetization_error_response(exc)
        return Response({"ok": True, "payout_id": payout_id}, status=status.HTTP_201_CREATED)


class MonetizationOverviewView(APIView):
    """
    Dashboard payload: wallet balance, earnings summary, recent gift receipts.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["creator"], responses={200: dict})
    def get(self, request):
        user_id = request_user_id(request)
        services = get_services()

        try:
            wallet_balance = services.wallets.get_balance(user_id)
            earnings = services.earnings.get_summary(user_id)
        except MonetizationError as exc:
            return monetization_error_response(exc)

        gifts_qs = GiftTransaction.objects.filter(creator_id=user_id)
        recent = list(
            gifts_qs.order_by("-created_at").values("coins_spent", "diamonds_earned", "created_at")[:RECENT_GIFTS_LIMIT]
        )
        totals = gifts_qs.aggregate(coins_total=Sum("coins_spent"), diamonds_total=Sum("diamonds_earned"))

        return Response(
            {
                "wallet_balance": wallet_balance,
                "earnings": earnings,
                "recent_gifts": recent,
                "aggregates": {
                    "coins_total": int(totals["coins_total"] or 0),
                    "diamonds_total": int(totals["diamonds_total"] or 0),
                },
            }
        )


class ConnectOnboardingView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["connect"], request=OnboardingInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = OnboardingInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="INVALID_REQUEST",
                message=str(serializer.errors),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            url = get_services().connect.onboarding_link(
                request_user_id(request),
                serializer.validated_data["return_url"],
                serializer.validated_data.get("refresh_url") or None,
                email=getattr(request.user, "email", "") or "",
            )
        except MonetizationError as exc:
            return monetization_error_response(exc)
        return Response({"url": url})


class ConnectStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["connect"], responses={200: dict})
    def get(self, request):
        user_id = request_user_id(request)
        connect = get_services().connect
        try:
            connect.refresh_account_status(user_id)
        except MonetizationError as exc:
            return monetization_error_response(exc)
        return Response(connect.get_status(user_id))


# =====================================================
# ADMIN
# =====================================================


class PendingPayoutsView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(tags=["admin-payouts"], responses={200: PayoutSerializer(many=True)})
    def get(self, request):
        payouts = get_services().payout_approval.list_pending()
        return Response({"payouts": PayoutSerializer(payouts, many=True).data})


class ApprovePayoutView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(tags=["admin-payouts"], request=None, responses={200: PayoutSerializer})
    def post(self, request, payout_id: int):
        try:
            payout = get_services().payout_approval.approve_payout(payout_id)
        except MonetizationError as exc:
            return monetization_error_response(exc)
        return Response({"ok": True, "payout": PayoutSerializer(payout).data})
