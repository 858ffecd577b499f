# gifting/api/views.py

"""
GIFTING API VIEWS

- GET  /api/gifts/        active catalogue (cheapest first)
- POST /api/gifts/send/   send a gift to a creator

Every failure renders {"error": {"code", "message"}}.
"""

from __future__ import annotations

from dataclasses import asdict

from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.container import get_services
from common.auth import request_user_id
from common.exceptions import MonetizationError
from common.responses import error_response, monetization_error_response
from gifting.api.serializers import (
    GiftSerializer,
    SendGiftInputSerializer,
    SendGiftOutputSerializer,
)


class GiftListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["gifts"], responses={200: GiftSerializer(many=True)})
    def get(self, request):
        gifts = get_services().gifts.list_active()
        return Response({"gifts": GiftSerializer(gifts, many=True).data})


class SendGiftView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["gifts"],
        request=SendGiftInputSerializer,
        responses={200: SendGiftOutputSerializer},
        examples=[
            OpenApiExample(
                "Send two roses",
                value={"creator_id": "42", "gift_code": "rose", "quantity": 2, "story_id": "s-9"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = SendGiftInputSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                code="INVALID_REQUEST",
                message=str(serializer.errors),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data

        sender_id = request_user_id(request)
        if str(data["creator_id"]) == sender_id:
            return error_response(
                code="INVALID_RECIPIENT",
                message="You cannot send a gift to yourself.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = get_services().gifts.send_gift(
                sender_id=sender_id,
                creator_id=data["creator_id"],
                gift_code=data["gift_code"],
                quantity=data.get("quantity"),
                story_id=data.get("story_id") or None,
            )
        except MonetizationError as exc:
            return monetization_error_response(exc)

        return Response({"ok": True, **asdict(result)}, status=status.HTTP_200_OK)
