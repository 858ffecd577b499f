# payments/admin.py

from django.contrib import admin

from payments.models.coin_purchase import CoinPurchase


@admin.register(CoinPurchase)
class CoinPurchaseAdmin(admin.ModelAdmin):
    list_display = ("provider_payment_id", "user_id", "status", "amount", "coins_credited", "refunded_coins", "created_at")
    list_filter = ("status", "provider")
    search_fields = ("provider_payment_id", "user_id")
    readonly_fields = [f.name for f in CoinPurchase._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
