# payouts/api/serializers.py

from rest_framework import serializers

from payouts.models.payout import Payout


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = (
            "id",
            "creator_id",
            "provider",
            "status",
            "amount",
            "currency",
            "diamonds",
            "provider_payout_id",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class OnboardingInputSerializer(serializers.Serializer):
    return_url = serializers.URLField()
    refresh_url = serializers.URLField(required=False, allow_blank=True)
