# payments/views/coins.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.container import get_services
from common.auth import request_user_id
from common.exceptions import MonetizationError
from common.responses import error_response, monetization_error_response


class CoinIntentInputSerializer(serializers.Serializer):
    amount_coins = serializers.IntegerField(min_value=1)


class CoinPurchaseIntentView(APIView):
    """
    Create a Stripe PaymentIntent for a coin bundle.
    Coins are credited by the payment webhook, never by this endpoint.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["payments"], request=CoinIntentInputSerializer, responses={201: dict})
    def post(self, request):
        serializer = CoinIntentInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="INVALID_REQUEST",
                message=str(serializer.errors),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            intent = get_services().coin_purchases.create_purchase_intent(
                request_user_id(request), serializer.validated_data["amount_coins"]
            )
        except MonetizationError as exc:
            return monetization_error_response(exc)

        return Response(intent, status=status.HTTP_201_CREATED)
