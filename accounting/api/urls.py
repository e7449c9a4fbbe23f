# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# LedgerEntryViewSet lives in accounting/api/view.py (singular).
# Imported directly to avoid circular imports through views/__init__.py.
from accounting.api.view import LedgerEntryViewSet
from accounting.api.views.account_ledger import AccountLedgerView
from accounting.api.views.accounts import AccountViewSet
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.trial_balance import TrialBalanceView
from accounting.api.views.vouchers import VoucherViewSet

router = DefaultRouter()
router.register("accounts", AccountViewSet, basename="account")
router.register("vouchers", VoucherViewSet, basename="voucher")
router.register("ledger-entries", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    path("", include(router.urls)),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path(
        "accounts/<int:account_id>/ledger/",
        AccountLedgerView.as_view(),
        name="account-ledger",
    ),
]
