# gifting/api/serializers.py

from rest_framework import serializers

from gifting.models.gift import Gift


class GiftSerializer(serializers.ModelSerializer):
    class Meta:
        model = Gift
        fields = ("id", "code", "name", "price_coins", "diamond_value")
        read_only_fields = fields


class SendGiftInputSerializer(serializers.Serializer):
    creator_id = serializers.CharField(max_length=64)
    gift_code = serializers.CharField(max_length=64)
    # Fractions are floored by the pipeline; < 1 is rejected there
    quantity = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, default=1)
    story_id = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)


class SendGiftOutputSerializer(serializers.Serializer):
    gift_code = serializers.CharField()
    quantity = serializers.IntegerField()
    coins_spent = serializers.IntegerField()
    creator_diamonds = serializers.IntegerField()
    platform_diamonds = serializers.IntegerField()
    sender_balance = serializers.IntegerField()
    ledger_transaction_id = serializers.CharField()
