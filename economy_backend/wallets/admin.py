# wallets/admin.py

from django.contrib import admin

from wallets.models.wallet import Wallet


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    """Balances move only through WalletStore; admin is view-only."""

    list_display = ("user_id", "coin_balance", "updated_at")
    search_fields = ("user_id",)
    readonly_fields = ("user_id", "coin_balance", "created_at", "updated_at")
    ordering = ("user_id",)

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
