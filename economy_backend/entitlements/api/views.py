# entitlements/api/views.py

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.container import get_services
from common.auth import request_user_id
from common.exceptions import MonetizationError
from common.responses import error_response, monetization_error_response


class PurchaseEntitlementInputSerializer(serializers.Serializer):
    story_id = serializers.CharField(max_length=64)
    price_coins = serializers.IntegerField(min_value=1)


class EntitlementCheckView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["entitlements"],
        parameters=[OpenApiParameter(name="story_id", type=str, required=True)],
        responses={200: dict},
    )
    def get(self, request):
        story_id = (request.query_params.get("story_id") or "").strip()
        if not story_id:
            return error_response(
                code="INVALID_REQUEST",
                message="story_id is required",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        entitled = get_services().entitlements.has_entitlement(request_user_id(request), story_id)
        return Response({"story_id": story_id, "entitled": entitled})


class EntitlementPurchaseView(APIView):
    """
    Unlock a premium story with coins.

    Already-entitled users are answered without charging again.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["entitlements"], request=PurchaseEntitlementInputSerializer, responses={200: dict})
    def post(self, request):
        serializer = PurchaseEntitlementInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="INVALID_REQUEST",
                message=str(serializer.errors),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        user_id = request_user_id(request)
        story_id = serializer.validated_data["story_id"]
        service = get_services().entitlements

        if service.has_entitlement(user_id, story_id):
            return Response({"ok": True, "already": True, "story_id": story_id})

        try:
            service.purchase_entitlement_with_coins(
                user_id, story_id, serializer.validated_data["price_coins"]
            )
        except MonetizationError as exc:
            return monetization_error_response(exc)

        return Response({"ok": True, "already": False, "story_id": story_id})
