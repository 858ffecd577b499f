# ledger/api/views.py

"""
LEDGER API VIEWSETS (READ-ONLY / AUDIT SAFE)

- Strictly read-only: the ledger is only written through LedgerEngine
- Permission-gated via Django model permissions (no role hardcoding):
    ledger.view_ledgertransaction / ledger.view_ledgerentry
- Filtering via django-filter:
    /api/ledger/entries/?account=creator_earnings:42&currency=DIAMOND
    /api/ledger/entries/?transaction=<uuid>
"""

from django_filters import rest_framework as filters
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from ledger.api.serializers import LedgerEntrySerializer, LedgerTransactionSerializer
from ledger.models.entry import LedgerEntry
from ledger.models.transaction import LedgerTransaction


class LedgerEntryFilter(filters.FilterSet):
    account_prefix = filters.CharFilter(field_name="account", lookup_expr="startswith")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lt")

    class Meta:
        model = LedgerEntry
        fields = ["transaction", "account", "currency", "user_id", "reference_type", "reference_id"]


@extend_schema(tags=["ledger"])
class LedgerTransactionViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = LedgerTransactionSerializer
    http_method_names = ["get", "head", "options"]

    queryset = LedgerTransaction.objects.prefetch_related("entries").order_by("-created_at")

    def get_queryset(self):
        if not self.request.user.has_perm("ledger.view_ledgertransaction"):
            raise PermissionDenied("You do not have permission to view ledger transactions.")
        return super().get_queryset()


@extend_schema(tags=["ledger"])
class LedgerEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to ledger entries (append-only, audit-safe).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer
    http_method_names = ["get", "head", "options"]

    queryset = LedgerEntry.objects.select_related("transaction")
    filter_backends = [filters.DjangoFilterBackend, OrderingFilter]
    filterset_class = LedgerEntryFilter
    ordering_fields = ["created_at", "id"]
    ordering = ["-id"]

    def get_queryset(self):
        if not self.request.user.has_perm("ledger.view_ledgerentry"):
            raise PermissionDenied("You do not have permission to view ledger entries.")
        return super().get_queryset()
