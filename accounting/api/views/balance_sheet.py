"""
PATH: accounting/api/views/balance_sheet.py

BALANCE SHEET API VIEW (READ-ONLY)

- Permission-gated: requires accounting.view_ledgerentry
- Organization-scoped (X-Organization-ID)
- as_of_date (YYYY-MM-DD) is an inclusive cutoff; defaults to today
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.tenancy import OrganizationScopedMixin
from accounting.api.views.trial_balance import parse_date_param
from accounting.services.balance_sheet_service import generate_balance_sheet


class BalanceSheetView(OrganizationScopedMixin, APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="as_of_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Optional cutoff date (YYYY-MM-DD), inclusive.",
            ),
        ],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm("accounting.view_ledgerentry"):
            return Response(
                {"detail": "You do not have permission to view financial reports."},
                status=status.HTTP_403_FORBIDDEN,
            )

        as_of_date, error = parse_date_param(request, "as_of_date")
        if error:
            return error

        return Response(
            generate_balance_sheet(self.organization_id, as_of_date=as_of_date),
            status=status.HTTP_200_OK,
        )
