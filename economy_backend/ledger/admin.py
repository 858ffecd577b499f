# ledger/admin.py

from django.contrib import admin

from ledger.models.conversion_rate import ConversionRate
from ledger.models.entry import LedgerEntry
from ledger.models.transaction import LedgerTransaction


class ReadOnlyAdminMixin:
    """Ledger rows are append-only: no add / change / delete from admin."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# LEDGER TRANSACTION
# ============================================================


class LedgerEntryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = LedgerEntry
    extra = 0
    fields = ("account", "currency", "debit", "credit", "user_id", "reference_type", "reference_id")
    readonly_fields = fields


@admin.register(LedgerTransaction)
class LedgerTransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "description", "idempotency_key", "created_at")
    search_fields = ("id", "idempotency_key", "description")
    ordering = ("-created_at",)
    inlines = [LedgerEntryInline]


# ============================================================
# LEDGER ENTRY
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "transaction", "account", "currency", "debit", "credit", "created_at")
    list_filter = ("currency", "reference_type")
    search_fields = ("account", "user_id", "reference_id")
    ordering = ("-id",)


# ============================================================
# CONVERSION RATES (editable; services reload on restart or after RATE_CACHE_SECONDS)
# ============================================================


@admin.register(ConversionRate)
class ConversionRateAdmin(admin.ModelAdmin):
    list_display = ("from_unit", "to_unit", "rate", "updated_at")
    readonly_fields = ("updated_at",)
