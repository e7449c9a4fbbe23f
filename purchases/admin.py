# purchases/admin.py

from django.contrib import admin

from purchases.models import PurchaseInvoice, Supplier
from sales.admin import DOCUMENT_READONLY


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "ntn", "phone", "organization_id", "current_balance", "is_active")
    search_fields = ("name", "ntn", "phone")
    list_filter = ("is_active",)
    readonly_fields = ("current_balance",)


@admin.register(PurchaseInvoice)
class PurchaseInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "invoice_date",
        "supplier",
        "status",
        "total_amount",
        "organization_id",
    )
    readonly_fields = ("status",) + DOCUMENT_READONLY
    search_fields = ("invoice_number", "supplier__name")
    list_filter = ("status", "invoice_date")
