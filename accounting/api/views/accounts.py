# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API

GET    /api/accounting/accounts/            list (filters: account_type, is_group, ...)
POST   /api/accounting/accounts/            create (parent becomes a group)
GET    /api/accounting/accounts/<id>/       retrieve
PATCH  /api/accounting/accounts/<id>/       update (system accounts: limited fields)
DELETE /api/accounting/accounts/<id>/       soft delete
GET    /api/accounting/accounts/tree/       nested hierarchy
POST   /api/accounting/accounts/seed/       seed the default chart (idempotent)

Permission-gated with the model permissions of accounting.Account.
current_balance is read-only here; only posted vouchers move it.
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from accounting.api.errors import service_error_response
from accounting.api.filters import AccountFilterSet
from accounting.api.serializers import (
    AccountCreateSerializer,
    AccountListSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.models.account import Account
from accounting.services import account_service
from accounting.services.account_registry import find_account_by_id
from accounting.services.chart_seed import seed_default_chart
from accounting.services.exceptions import AccountingServiceError


def _require(request, perm: str, message: str) -> None:
    if not request.user.has_perm(perm):
        raise PermissionDenied(message)


@extend_schema(tags=["accounting"])
class AccountViewSet(OrganizationScopedMixin, GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = AccountFilterSet
    search_fields = ["code", "name"]
    ordering_fields = ["code", "name", "current_balance"]
    ordering = ["code"]

    def get_queryset(self):
        return Account.active_objects.filter(organization_id=self.organization_id).select_related("parent")

    def _get_account(self, pk) -> Account:
        return find_account_by_id(self.organization_id, pk)

    @extend_schema(responses=AccountListSerializer(many=True))
    def list(self, request):
        _require(request, "accounting.view_account", "You do not have permission to view accounts.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(AccountListSerializer(page, many=True).data)
        return Response(AccountListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        _require(request, "accounting.view_account", "You do not have permission to view accounts.")
        try:
            account = self._get_account(pk)
        except AccountingServiceError as exc:
            return service_error_response(exc)
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(request=AccountCreateSerializer, responses={201: AccountSerializer})
    def create(self, request):
        _require(request, "accounting.add_account", "You do not have permission to create accounts.")

        s = AccountCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            account = account_service.create_account(self.organization_id, user=request.user, **s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AccountUpdateSerializer, responses=AccountSerializer)
    def partial_update(self, request, pk=None):
        _require(request, "accounting.change_account", "You do not have permission to change accounts.")

        s = AccountUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            account = self._get_account(pk)
            account = account_service.update_account(account, user=request.user, **s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(request=AccountUpdateSerializer, responses=AccountSerializer)
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        _require(request, "accounting.delete_account", "You do not have permission to delete accounts.")

        try:
            account = self._get_account(pk)
            account_service.delete_account(account, user=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        parameters=[
            OpenApiParameter(name="account_type", type=str, required=False, description="Restrict to one type."),
        ],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="tree")
    def tree(self, request):
        _require(request, "accounting.view_account", "You do not have permission to view accounts.")
        tree = account_service.get_account_tree(
            self.organization_id,
            account_type=request.query_params.get("account_type") or None,
        )
        return Response(tree, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: dict, 201: dict})
    @action(detail=False, methods=["post"], url_path="seed")
    def seed(self, request):
        _require(request, "accounting.add_account", "You do not have permission to seed the chart of accounts.")
        summary = seed_default_chart(self.organization_id, user=request.user)
        http_status = status.HTTP_201_CREATED if summary["created"] else status.HTTP_200_OK
        return Response(summary, status=http_status)
