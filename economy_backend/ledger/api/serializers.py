# ledger/api/serializers.py

from rest_framework import serializers

from ledger.models.entry import LedgerEntry
from ledger.models.transaction import LedgerTransaction


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = "__all__"
        read_only_fields = ("id",)


class LedgerTransactionSerializer(serializers.ModelSerializer):
    entries = LedgerEntrySerializer(many=True, read_only=True)

    class Meta:
        model = LedgerTransaction
        fields = ("id", "idempotency_key", "description", "created_at", "entries")
        read_only_fields = fields
