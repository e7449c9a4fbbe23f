# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.models.sequence import VoucherSequence
from accounting.models.voucher import Voucher, VoucherLine


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "organization_id",
        "is_group",
        "current_balance",
        "is_active",
    )
    list_filter = ("account_type", "is_group", "is_active", "is_system_account")
    search_fields = ("code", "name", "organization_id")
    ordering = ("organization_id", "code")
    readonly_fields = ("normal_balance", "level", "current_balance", "created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("organization_id", "code", "name", "description", "account_type", "category"),
            },
        ),
        (
            "Hierarchy",
            {
                "fields": ("parent", "level", "is_group"),
            },
        ),
        (
            "Balances",
            {
                "fields": ("normal_balance", "opening_balance", "current_balance"),
            },
        ),
        (
            "Flags",
            {
                "fields": ("is_system_account", "is_tax_account", "tax_rate", "is_bank_account", "is_active"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# VOUCHER (READ-ONLY; use the API to change state)
# ============================================================


class VoucherLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = VoucherLine
    extra = 0
    fields = ("line_number", "account", "entry_type", "amount", "description")
    readonly_fields = fields


@admin.register(Voucher)
class VoucherAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "voucher_number",
        "voucher_type",
        "voucher_date",
        "status",
        "total_debit",
        "total_credit",
        "organization_id",
    )
    list_filter = ("voucher_type", "status", "fiscal_year")
    search_fields = ("voucher_number", "narration", "reference_number")
    ordering = ("-voucher_date",)
    inlines = [VoucherLineInline]


# ============================================================
# LEDGER ENTRY (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "voucher_number",
        "account",
        "entry_type",
        "amount",
        "running_balance",
        "status",
        "entry_date",
    )
    list_filter = ("entry_type", "status", "fiscal_year")
    search_fields = ("voucher_number", "account__code")
    ordering = ("entry_date", "id")


@admin.register(VoucherSequence)
class VoucherSequenceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("organization_id", "voucher_type", "fiscal_year", "last_number", "updated_at")
    list_filter = ("voucher_type", "fiscal_year")
