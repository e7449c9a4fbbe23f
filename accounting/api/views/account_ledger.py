"""
PATH: accounting/api/views/account_ledger.py

ACCOUNT LEDGER (STATEMENT) API VIEW

GET /api/accounting/accounts/<id>/ledger/?start_date=&end_date=&include_void=1
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import service_error_response
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.api.views.trial_balance import parse_date_param
from accounting.services.account_registry import find_account_by_id
from accounting.services.balance_service import get_account_ledger
from accounting.services.exceptions import AccountingServiceError


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
        OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
        OpenApiParameter(
            name="include_void",
            type=bool,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Include voided originals and their reversals.",
        ),
    ],
    responses={200: dict},
)
class AccountLedgerView(OrganizationScopedMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id: int):
        if not request.user.has_perm("accounting.view_ledgerentry"):
            return Response(
                {"detail": "You do not have permission to view the account ledger."},
                status=status.HTTP_403_FORBIDDEN,
            )

        start_date, error = parse_date_param(request, "start_date")
        if error:
            return error
        end_date, error = parse_date_param(request, "end_date")
        if error:
            return error

        include_void = str(request.query_params.get("include_void", "")).lower() in {"1", "true", "yes"}

        try:
            account = find_account_by_id(self.organization_id, account_id)
            data = get_account_ledger(
                account,
                start_date=start_date,
                end_date=end_date,
                include_void=include_void,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
