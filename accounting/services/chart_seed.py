# accounting/services/chart_seed.py

"""
======================================================
PATH: accounting/services/chart_seed.py
======================================================
DEFAULT CHART OF ACCOUNTS (SEEDING)

seed_default_chart(organization_id) creates the standard chart for an
organization. Idempotent: existing codes are left untouched, so running
it twice creates nothing the second time.

Parents are listed before children; level and normal balance are
derived by Account.clean().
"""

from __future__ import annotations

import logging
from collections import Counter
from decimal import Decimal

from django.db import transaction

from accounting.models.account import Account

logger = logging.getLogger(__name__)

A, L, E, R, X = Account.ASSET, Account.LIABILITY, Account.EQUITY, Account.REVENUE, Account.EXPENSE

# (code, name, type, category, parent_code, is_group, extra)
DEFAULT_CHART = [
    ("1000", "Assets", A, "current_asset", None, True, {}),
    ("1100", "Current Assets", A, "current_asset", "1000", True, {}),
    ("1101", "Cash in Hand", A, "current_asset", "1100", False, {}),
    ("1102", "Cash at Bank", A, "current_asset", "1100", False, {"is_bank_account": True}),
    ("1103", "Petty Cash", A, "current_asset", "1100", False, {}),
    ("1200", "Accounts Receivable", A, "current_asset", "1100", False, {}),
    ("1300", "Inventory", A, "current_asset", "1100", False, {}),
    ("1400", "Fixed Assets", A, "fixed_asset", "1000", True, {}),
    ("1401", "Land & Building", A, "fixed_asset", "1400", False, {}),
    ("1402", "Plant & Machinery", A, "fixed_asset", "1400", False, {}),
    ("1403", "Furniture & Fixtures", A, "fixed_asset", "1400", False, {}),
    ("1404", "Vehicles", A, "fixed_asset", "1400", False, {}),
    ("1405", "Computer Equipment", A, "fixed_asset", "1400", False, {}),
    ("2000", "Liabilities", L, "current_liability", None, True, {}),
    ("2100", "Current Liabilities", L, "current_liability", "2000", True, {}),
    ("2101", "Accounts Payable", L, "current_liability", "2100", False, {}),
    (
        "2102",
        "Sales Tax Payable",
        L,
        "current_liability",
        "2100",
        False,
        {"is_tax_account": True, "tax_rate": Decimal("18.00")},
    ),
    ("2103", "Income Tax Payable", L, "current_liability", "2100", False, {"is_tax_account": True}),
    ("2104", "Salary Payable", L, "current_liability", "2100", False, {}),
    ("2400", "Long-term Liabilities", L, "long_term_liability", "2000", True, {}),
    ("2401", "Long-term Loans", L, "long_term_liability", "2400", False, {}),
    ("3000", "Owner Equity", E, "owner_equity", None, True, {}),
    ("3001", "Capital", E, "owner_equity", "3000", False, {}),
    ("3002", "Retained Earnings", E, "retained_earnings", "3000", False, {}),
    ("3003", "Current Year Earnings", E, "retained_earnings", "3000", False, {}),
    ("4000", "Revenue", R, "sales_revenue", None, True, {}),
    ("4001", "Sales Revenue", R, "sales_revenue", "4000", False, {}),
    ("4002", "Service Revenue", R, "sales_revenue", "4000", False, {}),
    ("4100", "Other Revenue", R, "other_revenue", "4000", True, {}),
    ("4101", "Interest Income", R, "other_revenue", "4100", False, {}),
    ("5000", "Expenses", X, "operating_expense", None, True, {}),
    ("5100", "Cost of Goods Sold", X, "cost_of_goods_sold", "5000", True, {}),
    ("5101", "Purchases", X, "cost_of_goods_sold", "5100", False, {}),
    ("5102", "Direct Labor", X, "cost_of_goods_sold", "5100", False, {}),
    ("5200", "Operating Expenses", X, "operating_expense", "5000", True, {}),
    ("5201", "Salaries & Wages", X, "operating_expense", "5200", False, {}),
    ("5202", "Rent Expense", X, "operating_expense", "5200", False, {}),
    ("5203", "Utilities Expense", X, "operating_expense", "5200", False, {}),
    ("5204", "Telephone & Internet", X, "operating_expense", "5200", False, {}),
    ("5205", "Office Supplies", X, "operating_expense", "5200", False, {}),
    ("5206", "Depreciation Expense", X, "operating_expense", "5200", False, {}),
    ("5207", "Insurance Expense", X, "operating_expense", "5200", False, {}),
    ("5208", "Repairs & Maintenance", X, "operating_expense", "5200", False, {}),
    ("5800", "Financial Expenses", X, "financial_expense", "5000", True, {}),
    ("5801", "Interest Expense", X, "financial_expense", "5800", False, {}),
    ("5802", "Bank Charges", X, "financial_expense", "5800", False, {}),
]


@transaction.atomic
def seed_default_chart(organization_id: str, *, user=None) -> dict:
    by_code: dict[str, Account] = {}
    created = 0
    existing = 0

    for code, name, account_type, category, parent_code, is_group, extra in DEFAULT_CHART:
        account = Account.objects.filter(organization_id=organization_id, code=code).first()
        if account is not None:
            existing += 1
            by_code[code] = account
            continue

        account = Account.objects.create(
            organization_id=organization_id,
            code=code,
            name=name,
            account_type=account_type,
            category=category,
            parent=by_code.get(parent_code) if parent_code else None,
            is_group=is_group,
            is_system_account=True,
            created_by=user,
            **extra,
        )
        by_code[code] = account
        created += 1

    by_type = Counter(
        Account.active_objects.filter(organization_id=organization_id).values_list("account_type", flat=True)
    )

    logger.info(
        "Default chart seeded",
        extra={"organization_id": organization_id, "created": created, "existing": existing},
    )
    return {
        "organization_id": organization_id,
        "created": created,
        "existing": existing,
        "total": sum(by_type.values()),
        "by_type": {t: by_type.get(t, 0) for t, _ in Account.ACCOUNT_TYPES},
    }
