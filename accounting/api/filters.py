# accounting/api/filters.py

import django_filters

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher


class VoucherFilterSet(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="voucher_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="voucher_date", lookup_expr="lte")

    class Meta:
        model = Voucher
        fields = ["status", "voucher_type", "fiscal_year", "fiscal_period", "reference_type", "reference_id"]


class LedgerEntryFilterSet(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="entry_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="entry_date", lookup_expr="lte")

    class Meta:
        model = LedgerEntry
        fields = ["voucher", "account", "status", "entry_type", "fiscal_year", "fiscal_period"]


class AccountFilterSet(django_filters.FilterSet):
    class Meta:
        model = Account
        fields = ["account_type", "category", "is_group", "is_active", "parent", "level"]
