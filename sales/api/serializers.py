# sales/api/serializers.py

from rest_framework import serializers

from accounting.api.documents import AMOUNT_INPUT_FIELDS, DOCUMENT_READ_FIELDS
from sales.models import SalesInvoice, WalkInSale


class SalesInvoiceSerializer(serializers.ModelSerializer):
    voucher_number = serializers.CharField(source="voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = SalesInvoice
        fields = (
            "invoice_number",
            "invoice_date",
            "due_date",
            "customer_name",
            "customer_ntn",
            "customer_address",
            "receivable_account",
            "revenue_account",
            "tax_account",
        ) + DOCUMENT_READ_FIELDS
        read_only_fields = fields


class SalesInvoiceWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalesInvoice
        fields = (
            "invoice_number",
            "invoice_date",
            "due_date",
            "customer_name",
            "customer_ntn",
            "customer_address",
            "receivable_account",
            "revenue_account",
            "tax_account",
            "shipping_charges",
        ) + AMOUNT_INPUT_FIELDS
        # Uniqueness is checked per organization by the document service.
        validators = []


class WalkInSaleSerializer(serializers.ModelSerializer):
    voucher_number = serializers.CharField(source="voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = WalkInSale
        fields = (
            "sale_number",
            "sale_date",
            "customer_name",
            "customer_phone",
            "cash_account",
            "revenue_account",
            "tax_account",
        ) + DOCUMENT_READ_FIELDS
        read_only_fields = fields


class WalkInSaleWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalkInSale
        fields = (
            "sale_number",
            "sale_date",
            "customer_name",
            "customer_phone",
            "cash_account",
            "revenue_account",
            "tax_account",
        ) + AMOUNT_INPUT_FIELDS
        validators = []
