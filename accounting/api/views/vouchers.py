# accounting/api/views/vouchers.py

"""
PATH: accounting/api/views/vouchers.py

VOUCHER API

GET    /api/accounting/vouchers/                 list (status, voucher_type, fiscal_year, ...)
POST   /api/accounting/vouchers/                 create draft (optionally auto_post)
GET    /api/accounting/vouchers/<id>/            retrieve with lines
PATCH  /api/accounting/vouchers/<id>/            edit a draft
DELETE /api/accounting/vouchers/<id>/            soft delete a draft
POST   /api/accounting/vouchers/<id>/post/       post to the ledger
POST   /api/accounting/vouchers/<id>/void/       void with reversal entries (document vouchers: cancel the document)
GET    /api/accounting/vouchers/statistics/      counts per type for a fiscal year

The views only translate HTTP <-> service calls. Every rule lives in
voucher_service / ledger_engine so internal callers get the same behaviour.
"""

from __future__ import annotations

from django.db import transaction
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
from accounting.api.filters import VoucherFilterSet
from accounting.api.serializers import (
    VoidVoucherSerializer,
    VoucherCreateSerializer,
    VoucherSerializer,
    VoucherUpdateSerializer,
)
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.models.voucher import Voucher
from accounting.services import voucher_service
from accounting.services.exceptions import AccountingServiceError
from accounting.services.ledger_engine import post_voucher, void_voucher


def _require(request, perm: str, message: str) -> None:
    if not request.user.has_perm(perm):
        raise PermissionDenied(message)


@extend_schema(tags=["accounting"])
class VoucherViewSet(OrganizationScopedMixin, GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = VoucherSerializer

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = VoucherFilterSet
    search_fields = ["voucher_number", "narration", "reference_number"]
    ordering_fields = ["voucher_date", "voucher_number", "created_at", "total_debit"]
    ordering = ["-voucher_date", "-voucher_number"]

    def get_queryset(self):
        return (
            Voucher.active_objects.filter(organization_id=self.organization_id)
            .select_related("created_by", "posted_by", "voided_by")
            .prefetch_related("lines__account")
        )

    def _get_voucher(self, pk) -> Voucher:
        return voucher_service.find_voucher_by_id(self.organization_id, pk)

    def list(self, request):
        _require(request, "accounting.view_voucher", "You do not have permission to view vouchers.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(VoucherSerializer(page, many=True).data)
        return Response(VoucherSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        _require(request, "accounting.view_voucher", "You do not have permission to view vouchers.")
        try:
            voucher = self._get_voucher(pk)
        except AccountingServiceError as exc:
            return service_error_response(exc)
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_200_OK)

    @extend_schema(request=VoucherCreateSerializer, responses={201: VoucherSerializer})
    def create(self, request):
        _require(request, "accounting.add_voucher", "You do not have permission to create vouchers.")

        s = VoucherCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        auto_post = data.pop("auto_post", False)
        if auto_post:
            _require(request, "accounting.post_voucher", "You do not have permission to post vouchers.")

        try:
            # auto_post is all-or-nothing: a failed post leaves no draft behind.
            with transaction.atomic():
                voucher = voucher_service.create_draft(
                    organization_id=self.organization_id,
                    lines=data.pop("entries"),
                    user=request.user,
                    **data,
                )
                if auto_post:
                    voucher = post_voucher(voucher, actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        voucher = self._get_voucher(voucher.pk)
        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=VoucherUpdateSerializer, responses=VoucherSerializer)
    def partial_update(self, request, pk=None):
        _require(request, "accounting.change_voucher", "You do not have permission to change vouchers.")

        s = VoucherUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            voucher = self._get_voucher(pk)
            voucher = voucher_service.update_draft(
                voucher,
                lines=data.pop("entries", None),
                user=request.user,
                **data,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(self._get_voucher(voucher.pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=VoucherUpdateSerializer, responses=VoucherSerializer)
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        _require(request, "accounting.delete_voucher", "You do not have permission to delete vouchers.")

        try:
            voucher_service.delete_draft(self._get_voucher(pk), user=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses=VoucherSerializer)
    @action(detail=True, methods=["post"], url_path="post", url_name="post")
    def post_to_ledger(self, request, pk=None):
        _require(request, "accounting.post_voucher", "You do not have permission to post vouchers.")

        try:
            voucher = post_voucher(self._get_voucher(pk), actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(self._get_voucher(voucher.pk)).data, status=status.HTTP_200_OK)

    @extend_schema(request=VoidVoucherSerializer, responses=VoucherSerializer)
    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request, pk=None):
        _require(request, "accounting.void_voucher", "You do not have permission to void vouchers.")

        s = VoidVoucherSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            voucher = void_voucher(
                self._get_voucher(pk),
                actor=request.user,
                reason=s.validated_data["reason"],
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(self._get_voucher(voucher.pk)).data, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[OpenApiParameter(name="fiscal_year", type=str, required=False, description="YYYY, defaults to current year")],
        responses={200: dict},
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request):
        _require(request, "accounting.view_voucher", "You do not have permission to view vouchers.")
        data = voucher_service.get_voucher_statistics(
            self.organization_id,
            fiscal_year=request.query_params.get("fiscal_year") or None,
        )
        return Response(data, status=status.HTTP_200_OK)
