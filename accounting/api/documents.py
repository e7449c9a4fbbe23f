# accounting/api/documents.py

"""
PATH: accounting/api/documents.py

POSTABLE DOCUMENT VIEWSET (SHARED BY SALES + PURCHASES)

Subclasses set:
- model                    PostableDocument subclass
- serializer_class         read serializer
- write_serializer_class   create/update input
- post_document            staticmethod wrapping a posting function

Routes (relative to the router prefix):
    GET    /                list (status, date range)
    POST   /                create draft
    GET    /<id>/           retrieve
    PATCH  /<id>/           edit draft
    DELETE /<id>/           delete draft
    POST   /<id>/post/      post (creates + posts the voucher)
    POST   /<id>/cancel/    cancel (voids the voucher when posted)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from accounting.api.errors import service_error_response
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.models.document import PostableDocument
from accounting.services import document_service
from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import cancel_document, get_document


DOCUMENT_READ_FIELDS = (
    "id",
    "status",
    "subtotal",
    "total_discount",
    "taxable_amount",
    "total_tax",
    "shipping_charges",
    "other_charges",
    "total_amount",
    "notes",
    "voucher",
    "voucher_number",
    "is_posted",
    "posted_at",
    "cancelled_at",
    "cancel_reason",
    "created_at",
    "updated_at",
)

AMOUNT_INPUT_FIELDS = (
    "subtotal",
    "total_discount",
    "total_tax",
    "other_charges",
    "notes",
)


class CancelDocumentSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class PostableDocumentViewSet(OrganizationScopedMixin, GenericViewSet):
    permission_classes = [IsAuthenticated]

    model = None
    write_serializer_class = None
    post_document = None

    filter_backends = [SearchFilter, OrderingFilter]
    ordering = ["-created_at"]

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _perm(self, verb: str) -> str:
        opts = self.model._meta
        return f"{opts.app_label}.{verb}_{opts.model_name}"

    def _require(self, perm: str) -> None:
        if not self.request.user.has_perm(perm):
            raise PermissionDenied("You do not have permission to perform this action.")

    def get_queryset(self):
        qs = self.model.objects.filter(organization_id=self.organization_id).select_related("voucher")

        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)

        date_field = self.model.document_date_field
        start = self.request.query_params.get("start_date")
        end = self.request.query_params.get("end_date")
        if start:
            qs = qs.filter(**{f"{date_field}__gte": start})
        if end:
            qs = qs.filter(**{f"{date_field}__lte": end})
        return qs

    def _get(self, pk) -> PostableDocument:
        return get_document(self.model, self.organization_id, pk)

    def _out(self, document, http_status=status.HTTP_200_OK) -> Response:
        document = self._get(document.pk)
        return Response(self.get_serializer(document).data, status=http_status)

    # ------------------------------------------------------------
    # CRUD (drafts)
    # ------------------------------------------------------------

    def list(self, request):
        self._require(self._perm("view"))

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        self._require(self._perm("view"))
        try:
            return self._out(self._get(pk))
        except AccountingServiceError as exc:
            return service_error_response(exc)

    def create(self, request):
        self._require(self._perm("add"))

        s = self.write_serializer_class(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            document = document_service.create_document(
                self.model,
                self.organization_id,
                user=request.user,
                **s.validated_data,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return self._out(document, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        self._require(self._perm("change"))

        s = self.write_serializer_class(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            document = document_service.update_document(self._get(pk), user=request.user, **s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return self._out(document)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        self._require(self._perm("delete"))

        try:
            document_service.delete_document(self._get(pk), user=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="post", url_name="post")
    def post_to_ledger(self, request, pk=None):
        self._require(self._perm("change"))
        self._require("accounting.post_voucher")

        try:
            document = self.post_document(self._get(pk), actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return self._out(document)

    @extend_schema(request=CancelDocumentSerializer)
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        self._require(self._perm("change"))

        s = CancelDocumentSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            document = self._get(pk)
            if document.voucher_id and document.status == PostableDocument.STATUS_POSTED:
                self._require("accounting.void_voucher")
            document = cancel_document(document, actor=request.user, reason=s.validated_data["reason"])
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return self._out(document)
