"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE API VIEW (READ-ONLY)

- Permission-gated: requires accounting.view_ledgerentry
- Organization-scoped (X-Organization-ID)
- Window: fiscal_year (YYYY) | fiscal_period (YYYY-MM) | start_date/end_date
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import service_error_response
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.services.exceptions import AccountingServiceError
from accounting.services.trial_balance_service import TrialBalanceService


def parse_date_param(request, name: str):
    """Returns (date | None, error Response | None)."""
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None, None
    d = parse_date(raw)
    if d is None:
        return None, Response(
            {"detail": f"Invalid {name} (expected YYYY-MM-DD)"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return d, None


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="fiscal_year", type=str, location=OpenApiParameter.QUERY, required=False),
        OpenApiParameter(name="fiscal_period", type=str, location=OpenApiParameter.QUERY, required=False),
        OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
        OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
    ],
    responses={200: dict},
)
class TrialBalanceView(OrganizationScopedMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_ledgerentry"):
            return Response(
                {"detail": "You do not have permission to view trial balance."},
                status=status.HTTP_403_FORBIDDEN,
            )

        start_date, error = parse_date_param(request, "start_date")
        if error:
            return error
        end_date, error = parse_date_param(request, "end_date")
        if error:
            return error

        try:
            data = TrialBalanceService().generate(
                self.organization_id,
                fiscal_year=request.query_params.get("fiscal_year") or None,
                fiscal_period=request.query_params.get("fiscal_period") or None,
                start_date=start_date,
                end_date=end_date,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
