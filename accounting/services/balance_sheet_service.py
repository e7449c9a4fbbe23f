# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET SERVICE

Pure accounting read service.

Responsibilities:
- Compute balances per leaf account as at a given date
- Classify balances into Assets (current / fixed), Liabilities
  (current / long-term) and Equity
- Report whether Assets = Liabilities + Equity

Important:
- Revenue/Expense activity is not closed into equity by a posting, so it is
  shown as "Retained Earnings" (net income to date) inside Equity.

Contract:
- Money values are 2dp strings (same as the trial balance)
- Only ACTIVE ledger entries count; a void voucher has no effect
- opening_balance is folded into every account figure
- The report never raises on imbalance; totals.is_balanced says so
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

CURRENT_ASSET_CATEGORIES = {"current_asset"}
CURRENT_LIABILITY_CATEGORIES = {"current_liability"}


def _q2(amount: Decimal) -> Decimal:
    return (amount or ZERO).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _section(rows: list) -> dict:
    return {"accounts": rows, "total": str(_q2(sum((Decimal(r["balance"]) for r in rows), ZERO)))}


def generate_balance_sheet(organization_id: str, *, as_of_date: date | None = None) -> dict:
    """
    Args:
        organization_id: tenant scope
        as_of_date: inclusive cutoff on entry_date; defaults to today

    Returns:
        {
            "organization_id": "...",
            "as_of_date": "YYYY-MM-DD",
            "assets": {"current": {...}, "fixed": {...}, "total": "0.00"},
            "liabilities": {"current": {...}, "long_term": {...}, "total": "0.00"},
            "equity": {"accounts": [...], "retained_earnings": "0.00", "total": "0.00"},
            "income_summary": {"revenue", "expense", "net_income"},
            "totals": {"assets", "liabilities", "equity",
                       "liabilities_plus_equity", "difference", "is_balanced"},
        }
    """
    as_of_date = as_of_date or timezone.localdate()

    accounts = list(
        Account.active_objects.filter(
            organization_id=organization_id,
            is_active=True,
            is_group=False,
        ).order_by("code")
    )

    rows = (
        LedgerEntry.objects.filter(
            organization_id=organization_id,
            status=LedgerEntry.STATUS_ACTIVE,
            account_id__in=[a.pk for a in accounts],
            entry_date__lte=as_of_date,
        )
        .values("account_id", "entry_type")
        .annotate(total=Sum("amount"))
    )

    debits: dict = {}
    credits: dict = {}
    for row in rows:
        target = debits if row["entry_type"] == LedgerEntry.DEBIT else credits
        target[row["account_id"]] = _q2(row["total"])

    assets = {"current": [], "fixed": []}
    liabilities = {"current": [], "long_term": []}
    equity_rows = []
    revenue_total = ZERO
    expense_total = ZERO

    for acc in accounts:
        d = debits.get(acc.pk, ZERO)
        c = credits.get(acc.pk, ZERO)
        movement = d - c if acc.is_debit_normal else c - d
        balance = _q2(acc.opening_balance + movement)

        if acc.account_type == Account.REVENUE:
            revenue_total += balance
            continue
        if acc.account_type == Account.EXPENSE:
            expense_total += balance
            continue

        # Below a cent is noise.
        if abs(balance) < TWOPLACES:
            continue

        entry = {
            "account_id": acc.pk,
            "code": acc.code,
            "name": acc.name,
            "category": acc.category,
            "balance": str(balance),
        }

        if acc.account_type == Account.ASSET:
            key = "current" if acc.category in CURRENT_ASSET_CATEGORIES else "fixed"
            assets[key].append(entry)
        elif acc.account_type == Account.LIABILITY:
            key = "current" if acc.category in CURRENT_LIABILITY_CATEGORIES else "long_term"
            liabilities[key].append(entry)
        elif acc.account_type == Account.EQUITY:
            equity_rows.append(entry)

    assets_out = {key: _section(items) for key, items in assets.items()}
    liabilities_out = {key: _section(items) for key, items in liabilities.items()}

    total_assets = _q2(sum((Decimal(s["total"]) for s in assets_out.values()), ZERO))
    total_liabilities = _q2(sum((Decimal(s["total"]) for s in liabilities_out.values()), ZERO))

    net_income = _q2(revenue_total - expense_total)
    total_equity = _q2(sum((Decimal(r["balance"]) for r in equity_rows), ZERO) + net_income)

    liabilities_plus_equity = _q2(total_liabilities + total_equity)
    difference = _q2(total_assets - liabilities_plus_equity)
    epsilon = Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_EPSILON", "0.01")))

    return {
        "organization_id": organization_id,
        "as_of_date": as_of_date.isoformat(),
        "assets": {**assets_out, "total": str(total_assets)},
        "liabilities": {**liabilities_out, "total": str(total_liabilities)},
        "equity": {
            "accounts": equity_rows,
            "retained_earnings": str(net_income),
            "total": str(total_equity),
        },
        "income_summary": {
            "revenue": str(_q2(revenue_total)),
            "expense": str(_q2(expense_total)),
            "net_income": str(net_income),
        },
        "totals": {
            "assets": str(total_assets),
            "liabilities": str(total_liabilities),
            "equity": str(total_equity),
            "liabilities_plus_equity": str(liabilities_plus_equity),
            "difference": str(difference),
            "is_balanced": abs(difference) < epsilon,
        },
    }
