# entitlements/admin.py

from django.contrib import admin

from entitlements.models.entitlement import Entitlement


@admin.register(Entitlement)
class EntitlementAdmin(admin.ModelAdmin):
    list_display = ("user_id", "story_id", "entitlement_type", "source", "expires_at", "created_at")
    list_filter = ("entitlement_type", "source")
    search_fields = ("user_id", "story_id")
