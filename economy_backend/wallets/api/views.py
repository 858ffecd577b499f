# wallets/api/views.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.container import get_services
from common.auth import request_user_id
from common.exceptions import MonetizationError
from common.responses import monetization_error_response


class WalletOutputSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    coin_balance = serializers.IntegerField()


class WalletView(APIView):
    """
    Current user's coin wallet (created lazily on first read).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["wallet"], responses={200: WalletOutputSerializer})
    def get(self, request):
        user_id = request_user_id(request)
        try:
            balance = get_services().wallets.get_balance(user_id)
        except MonetizationError as exc:
            return monetization_error_response(exc)

        return Response({"user_id": user_id, "coin_balance": balance})
