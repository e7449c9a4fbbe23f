# accounting/api/views/__init__.py

from accounting.api.views.account_ledger import AccountLedgerView
from accounting.api.views.accounts import AccountViewSet
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.trial_balance import TrialBalanceView
from accounting.api.views.vouchers import VoucherViewSet

__all__ = [
    "AccountViewSet",
    "AccountLedgerView",
    "BalanceSheetView",
    "TrialBalanceView",
    "VoucherViewSet",
]
