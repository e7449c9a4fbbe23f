# purchases/api/serializers.py

from rest_framework import serializers

from accounting.api.documents import AMOUNT_INPUT_FIELDS, DOCUMENT_READ_FIELDS
from purchases.models import PurchaseInvoice, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = (
            "id",
            "name",
            "ntn",
            "phone",
            "email",
            "address",
            "payable_account",
            "current_balance",
            "is_active",
            "created_at",
        )
        read_only_fields = ("id", "current_balance", "created_at")


class PurchaseInvoiceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    voucher_number = serializers.CharField(source="voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = PurchaseInvoice
        fields = (
            "supplier",
            "supplier_name",
            "invoice_number",
            "invoice_date",
            "due_date",
            "purchase_account",
            "tax_account",
            "payable_account",
        ) + DOCUMENT_READ_FIELDS
        read_only_fields = fields


class PurchaseInvoiceWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseInvoice
        fields = (
            "supplier",
            "invoice_number",
            "invoice_date",
            "due_date",
            "purchase_account",
            "tax_account",
            "payable_account",
            "shipping_charges",
        ) + AMOUNT_INPUT_FIELDS
        # Uniqueness per supplier is checked by the document service.
        validators = []
