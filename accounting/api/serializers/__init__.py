# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import (
    AccountCreateSerializer,
    AccountListSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.api.serializers.ledger_entries import LedgerEntrySerializer
from accounting.api.serializers.vouchers import (
    VoidVoucherSerializer,
    VoucherCreateSerializer,
    VoucherLineSerializer,
    VoucherSerializer,
    VoucherUpdateSerializer,
)

__all__ = [
    "AccountSerializer",
    "AccountListSerializer",
    "AccountCreateSerializer",
    "AccountUpdateSerializer",
    "LedgerEntrySerializer",
    "VoucherSerializer",
    "VoucherLineSerializer",
    "VoucherCreateSerializer",
    "VoucherUpdateSerializer",
    "VoidVoucherSerializer",
]
