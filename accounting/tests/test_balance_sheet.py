# accounting/tests/test_balance_sheet.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.account import Account
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.ledger_engine import void_voucher
from accounting.tests.utils import ORG, OTHER_ORG, cr, dr, make_account, make_posted


def _codes(section):
    return [row["code"] for row in section["accounts"]]


class BalanceSheetTests(TestCase):
    """
    GUARANTEES:
    - Assets = Liabilities + Equity once net income is carried as retained earnings
    - Current / non-current split follows the account category
    - Void vouchers and entries after as_of_date are ignored
    """

    def setUp(self):
        self.cash = make_account("1101", category="current_asset")
        self.equipment = make_account("1500", category="fixed_asset")
        self.idle = make_account("1300", category="current_asset")
        self.payable = make_account("2101", Account.LIABILITY, category="current_liability")
        self.loan = make_account("2200", Account.LIABILITY, category="long_term_liability")
        self.capital = make_account("3001", Account.EQUITY, category="owner_equity")
        self.revenue = make_account("4001", Account.REVENUE)
        self.rent = make_account("5202", Account.EXPENSE)

        make_posted([dr(self.cash, "5000.00"), cr(self.capital, "5000.00")], voucher_date=date(2025, 1, 5))
        make_posted([dr(self.equipment, "2000.00"), cr(self.loan, "2000.00")], voucher_date=date(2025, 1, 10))
        self.sale = make_posted([dr(self.cash, "1000.00"), cr(self.revenue, "1000.00")], voucher_date=date(2025, 2, 1))
        make_posted([dr(self.rent, "300.00"), cr(self.payable, "300.00")], voucher_date=date(2025, 3, 1))

    def test_sections_and_totals(self):
        sheet = generate_balance_sheet(ORG, as_of_date=date(2025, 12, 31))

        self.assertEqual(sheet["as_of_date"], "2025-12-31")
        self.assertEqual(_codes(sheet["assets"]["current"]), ["1101"])
        self.assertEqual(sheet["assets"]["current"]["total"], "6000.00")
        self.assertEqual(_codes(sheet["assets"]["fixed"]), ["1500"])
        self.assertEqual(sheet["assets"]["total"], "8000.00")

        self.assertEqual(sheet["liabilities"]["current"]["total"], "300.00")
        self.assertEqual(sheet["liabilities"]["long_term"]["total"], "2000.00")
        self.assertEqual(sheet["liabilities"]["total"], "2300.00")

        self.assertEqual(sheet["equity"]["retained_earnings"], "700.00")
        self.assertEqual(sheet["equity"]["total"], "5700.00")
        self.assertEqual(
            sheet["income_summary"],
            {"revenue": "1000.00", "expense": "300.00", "net_income": "700.00"},
        )

        self.assertEqual(sheet["totals"]["liabilities_plus_equity"], "8000.00")
        self.assertEqual(sheet["totals"]["difference"], "0.00")
        self.assertTrue(sheet["totals"]["is_balanced"])

    def test_zero_balance_accounts_are_left_out(self):
        sheet = generate_balance_sheet(ORG, as_of_date=date(2025, 12, 31))

        self.assertNotIn("1300", _codes(sheet["assets"]["current"]))

    def test_as_of_date_cuts_off_later_entries(self):
        sheet = generate_balance_sheet(ORG, as_of_date=date(2025, 1, 31))

        self.assertEqual(sheet["assets"]["total"], "7000.00")
        self.assertEqual(sheet["liabilities"]["total"], "2000.00")
        self.assertEqual(sheet["equity"]["retained_earnings"], "0.00")
        self.assertTrue(sheet["totals"]["is_balanced"])

    def test_void_voucher_drops_out(self):
        void_voucher(self.sale, None, "Sale entered in error")

        sheet = generate_balance_sheet(ORG)

        self.assertEqual(sheet["assets"]["current"]["total"], "5000.00")
        self.assertEqual(sheet["equity"]["retained_earnings"], "-300.00")
        self.assertEqual(sheet["totals"]["liabilities_plus_equity"], "7000.00")
        self.assertTrue(sheet["totals"]["is_balanced"])

    def test_opening_balance_is_included(self):
        bank = make_account("1102", category="current_asset", opening_balance="250.00")
        make_account("3002", Account.EQUITY, category="owner_equity", opening_balance="250.00")

        sheet = generate_balance_sheet(ORG, as_of_date=date(2025, 12, 31))

        self.assertIn(bank.code, _codes(sheet["assets"]["current"]))
        self.assertEqual(sheet["assets"]["total"], "8250.00")
        self.assertTrue(sheet["totals"]["is_balanced"])

    def test_other_organization_is_empty(self):
        sheet = generate_balance_sheet(OTHER_ORG, as_of_date=date(2025, 12, 31))

        self.assertEqual(sheet["assets"]["total"], "0.00")
        self.assertEqual(sheet["equity"]["accounts"], [])
        self.assertTrue(sheet["totals"]["is_balanced"])
