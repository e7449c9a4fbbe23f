# sales/admin.py

from django.contrib import admin

from sales.models import SalesInvoice, WalkInSale

DOCUMENT_READONLY = (
    "taxable_amount",
    "total_amount",
    "voucher",
    "is_posted",
    "posted_at",
    "posted_by",
    "cancelled_at",
    "cancelled_by",
    "cancel_reason",
    "created_at",
    "updated_at",
)


# ======================================================
# SALES INVOICE ADMIN
# ======================================================


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "invoice_date",
        "customer_name",
        "status",
        "total_amount",
        "organization_id",
    )
    readonly_fields = ("status",) + DOCUMENT_READONLY
    search_fields = ("invoice_number", "customer_name")
    list_filter = ("status", "invoice_date")


# ======================================================
# WALK-IN SALE ADMIN
# ======================================================


@admin.register(WalkInSale)
class WalkInSaleAdmin(admin.ModelAdmin):
    list_display = (
        "sale_number",
        "sale_date",
        "customer_name",
        "status",
        "total_amount",
        "organization_id",
    )
    readonly_fields = ("status",) + DOCUMENT_READONLY
    search_fields = ("sale_number", "customer_name", "customer_phone")
    list_filter = ("status", "sale_date")
