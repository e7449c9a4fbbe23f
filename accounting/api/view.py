# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

LEDGER ENTRY VIEWSET (READ-ONLY / AUDIT SAFE)

- Strictly read-only: ledger entries are append-only and only the ledger
  engine writes them
- Permission-gated via Django permissions (accounting.view_ledgerentry)
- Organization-scoped (X-Organization-ID)
- Filtering via django-filter:
    /api/accounting/ledger-entries/?voucher=<uuid>
    /api/accounting/ledger-entries/?account=28&status=active
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.filters import LedgerEntryFilterSet
from accounting.api.serializers import LedgerEntrySerializer
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.models.ledger import LedgerEntry


@extend_schema(tags=["accounting"])
class LedgerEntryViewSet(OrganizationScopedMixin, ReadOnlyModelViewSet):
    """
    Read-only access to ledger entries (append-only, audit-safe).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer
    http_method_names = ["get", "head", "options"]

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = LedgerEntryFilterSet
    ordering_fields = ["created_at", "entry_date", "id"]
    ordering = ["-entry_date", "-id"]

    queryset = LedgerEntry.objects.select_related("account", "voucher")

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_ledgerentry"):
            raise PermissionDenied("You do not have permission to view ledger entries.")

        return super().get_queryset().filter(organization_id=self.organization_id)
