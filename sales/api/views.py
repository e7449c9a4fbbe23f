# sales/api/views.py

"""
SALES DOCUMENT VIEWSETS

- Sales invoices (credit sales, JV on posting)
- Walk-in sales (cash counter sales, RV on posting)

CRUD is draft-only; posting and cancelling go through the posting orchestrator.
"""

from drf_spectacular.utils import extend_schema

from accounting.api.documents import PostableDocumentViewSet
from accounting.services.posting import post_sales_invoice, post_walk_in_sale
from sales.api.serializers import (
    SalesInvoiceSerializer,
    SalesInvoiceWriteSerializer,
    WalkInSaleSerializer,
    WalkInSaleWriteSerializer,
)
from sales.models import SalesInvoice, WalkInSale


@extend_schema(tags=["sales"])
class SalesInvoiceViewSet(PostableDocumentViewSet):
    model = SalesInvoice
    serializer_class = SalesInvoiceSerializer
    write_serializer_class = SalesInvoiceWriteSerializer
    post_document = staticmethod(post_sales_invoice)

    search_fields = ["invoice_number", "customer_name", "customer_ntn"]
    ordering_fields = ["invoice_date", "invoice_number", "total_amount", "created_at"]
    ordering = ["-invoice_date", "-created_at"]


@extend_schema(tags=["sales"])
class WalkInSaleViewSet(PostableDocumentViewSet):
    model = WalkInSale
    serializer_class = WalkInSaleSerializer
    write_serializer_class = WalkInSaleWriteSerializer
    post_document = staticmethod(post_walk_in_sale)

    search_fields = ["sale_number", "customer_name", "customer_phone"]
    ordering_fields = ["sale_date", "sale_number", "total_amount", "created_at"]
    ordering = ["-sale_date", "-created_at"]
