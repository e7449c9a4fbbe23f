# purchases/api/views.py

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.documents import PostableDocumentViewSet
from accounting.api.tenancy import OrganizationScopedMixin
from accounting.services.posting import post_purchase_invoice
from purchases.api.serializers import (
    PurchaseInvoiceSerializer,
    PurchaseInvoiceWriteSerializer,
    SupplierSerializer,
)
from purchases.models import PurchaseInvoice, Supplier


def _forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)


class SupplierListCreateView(OrganizationScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        if not request.user.has_perm("purchases.view_supplier"):
            return _forbidden("You do not have permission to view suppliers.")

        qs = Supplier.objects.filter(organization_id=self.organization_id)
        if request.query_params.get("include_inactive") not in {"1", "true"}:
            qs = qs.filter(is_active=True)
        return Response(
            SupplierSerializer(qs.order_by("name"), many=True).data, status=status.HTTP_200_OK
        )

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        if not request.user.has_perm("purchases.add_supplier"):
            return _forbidden("You do not have permission to create suppliers.")

        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            supplier = Supplier.objects.create(organization_id=self.organization_id, **s.validated_data)
        except ValidationError as exc:
            return Response(exc.message_dict, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED
        )


class SupplierDetailView(OrganizationScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    def _get(self, supplier_id):
        return Supplier.objects.filter(organization_id=self.organization_id, id=supplier_id).first()

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, supplier_id):
        if not request.user.has_perm("purchases.view_supplier"):
            return _forbidden("You do not have permission to view suppliers.")

        supplier = self._get(supplier_id)
        if supplier is None:
            return Response({"detail": "Supplier not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses=SupplierSerializer)
    def patch(self, request, supplier_id):
        if not request.user.has_perm("purchases.change_supplier"):
            return _forbidden("You do not have permission to change suppliers.")

        supplier = self._get(supplier_id)
        if supplier is None:
            return Response({"detail": "Supplier not found"}, status=status.HTTP_404_NOT_FOUND)

        s = SupplierSerializer(supplier, data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            supplier = s.save()
        except ValidationError as exc:
            return Response(exc.message_dict, status=status.HTTP_400_BAD_REQUEST)

        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)


@extend_schema(tags=["purchases"])
class PurchaseInvoiceViewSet(PostableDocumentViewSet):
    model = PurchaseInvoice
    serializer_class = PurchaseInvoiceSerializer
    write_serializer_class = PurchaseInvoiceWriteSerializer
    post_document = staticmethod(post_purchase_invoice)

    search_fields = ["invoice_number", "supplier__name"]
    ordering_fields = ["invoice_date", "invoice_number", "total_amount", "created_at"]
    ordering = ["-invoice_date", "-created_at"]

    def get_queryset(self):
        qs = super().get_queryset().select_related("supplier")
        supplier_id = self.request.query_params.get("supplier")
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)
        return qs
