# payouts/admin.py

from django.contrib import admin

from payouts.models.creator_account import CreatorAccount
from payouts.models.payout import Payout


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    """Approval goes through the admin API (transfer + ledger), not this form."""

    list_display = ("id", "creator_id", "status", "amount", "currency", "diamonds", "created_at")
    list_filter = ("status", "provider")
    search_fields = ("creator_id", "provider_payout_id")
    readonly_fields = [f.name for f in Payout._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CreatorAccount)
class CreatorAccountAdmin(admin.ModelAdmin):
    list_display = ("user_id", "provider", "provider_account_id", "details_submitted", "payouts_enabled")
    list_filter = ("payouts_enabled", "details_submitted")
    search_fields = ("user_id", "provider_account_id")
    readonly_fields = ("created_at", "updated_at")
