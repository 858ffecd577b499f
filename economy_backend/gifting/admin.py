# gifting/admin.py

from django.contrib import admin

from gifting.models.gift import Gift
from gifting.models.gift_transaction import GiftTransaction

# ============================================================
# GIFT CATALOGUE
# ============================================================


@admin.register(Gift)
class GiftAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "price_coins", "diamond_value", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("price_coins",)


# ============================================================
# RECEIPTS (read-only; the ledger is authoritative)
# ============================================================


@admin.register(GiftTransaction)
class GiftTransactionAdmin(admin.ModelAdmin):
    list_display = ("gift", "sender_id", "creator_id", "quantity", "coins_spent", "diamonds_earned", "created_at")
    search_fields = ("sender_id", "creator_id", "ledger_transaction_id")
    list_filter = ("gift",)

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
