# accounting/tests/test_voucher_service.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.voucher import Voucher
from accounting.services import voucher_service
from accounting.services.exceptions import (
    ImbalancedVoucherError,
    InvalidEntryError,
    LedgerValidationError,
    VoucherNotEditableError,
    VoucherNotFoundError,
)
from accounting.services.ledger_engine import post_voucher
from accounting.tests.utils import D, ORG, OTHER_ORG, cr, dr, make_account, make_draft, make_user


class VoucherDraftLifecycleTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.cash = make_account("1101")
        self.bank = make_account("1102")
        self.revenue = make_account("4001", Account.REVENUE)

    # --------------------------------------------------
    # create_draft
    # --------------------------------------------------

    def test_create_draft_stores_numbered_lines(self):
        voucher = make_draft([dr(self.cash, "250.00"), cr(self.revenue, "250.00", "Counter sale")], user=self.user)

        self.assertEqual(voucher.status, Voucher.STATUS_DRAFT)
        self.assertEqual(voucher.total_debit, D("250.00"))
        self.assertEqual(voucher.total_credit, D("250.00"))
        self.assertEqual(voucher.created_by, self.user)

        lines = list(voucher.lines.order_by("line_number"))
        self.assertEqual([l.line_number for l in lines], [1, 2])
        self.assertEqual(lines[0].entry_type, "DEBIT")
        self.assertEqual(lines[1].description, "Counter sale")

        # Drafts never touch balances.
        self.cash.refresh_from_db()
        self.assertEqual(self.cash.current_balance, D("0.00"))

    def test_typed_entry_form_is_accepted(self):
        voucher = make_draft(
            [
                {"account_id": self.cash.pk, "entry_type": "debit", "amount": "75.50"},
                {"account_id": self.revenue.pk, "entry_type": "CREDIT", "amount": "75.50"},
            ]
        )
        self.assertEqual(voucher.total_debit, D("75.50"))

    def test_imbalanced_draft_is_never_saved(self):
        with self.assertRaises(ImbalancedVoucherError) as ctx:
            make_draft([dr(self.cash, "100.00"), cr(self.revenue, "90.00")])

        self.assertEqual(ctx.exception.as_dict()["code"], "ImbalancedVoucherError")
        self.assertFalse(Voucher.objects.exists())

    def test_unknown_voucher_type_is_rejected(self):
        with self.assertRaises(InvalidEntryError):
            make_draft([dr(self.cash, "1.00"), cr(self.revenue, "1.00")], voucher_type="ZZ")

    def test_short_narration_is_rejected(self):
        with self.assertRaises(LedgerValidationError) as ctx:
            make_draft([dr(self.cash, "1.00"), cr(self.revenue, "1.00")], narration="abc")

        self.assertEqual(ctx.exception.errors[0]["field"], "narration")

    def test_account_from_another_organization_is_rejected(self):
        foreign = make_account("1101", organization_id=OTHER_ORG)
        with self.assertRaises(InvalidEntryError):
            make_draft([dr(foreign, "1.00"), cr(self.revenue, "1.00")])

    # --------------------------------------------------
    # update / delete
    # --------------------------------------------------

    def test_update_draft_replaces_lines_and_totals(self):
        voucher = make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")])

        updated = voucher_service.update_draft(
            voucher,
            narration="Split between cash and bank",
            lines=[dr(self.cash, "30.00"), dr(self.bank, "70.00"), cr(self.revenue, "100.00")],
        )

        self.assertEqual(updated.narration, "Split between cash and bank")
        self.assertEqual(updated.lines.count(), 3)
        self.assertEqual(updated.total_debit, D("100.00"))

    def test_update_cannot_move_draft_to_another_fiscal_year(self):
        voucher = make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")])

        with self.assertRaises(InvalidEntryError):
            voucher_service.update_draft(voucher, voucher_date=date(2026, 1, 2))

    def test_update_refuses_unknown_fields(self):
        voucher = make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")])

        with self.assertRaises(InvalidEntryError):
            voucher_service.update_draft(voucher, status=Voucher.STATUS_POSTED)

    def test_posted_voucher_cannot_be_updated_or_deleted(self):
        voucher = post_voucher(make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")]))

        with self.assertRaises(VoucherNotEditableError):
            voucher_service.update_draft(voucher, narration="Changed after posting")
        with self.assertRaises(VoucherNotEditableError):
            voucher_service.delete_draft(voucher)

    def test_delete_draft_is_soft(self):
        voucher = make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")])

        voucher_service.delete_draft(voucher, user=self.user)

        self.assertTrue(Voucher.objects.get(pk=voucher.pk).is_deleted)
        self.assertFalse(Voucher.active_objects.filter(pk=voucher.pk).exists())
        with self.assertRaises(VoucherNotFoundError):
            voucher_service.find_voucher_by_id(ORG, voucher.pk)

    def test_find_voucher_is_scoped_to_organization(self):
        voucher = make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")])

        with self.assertRaises(VoucherNotFoundError):
            voucher_service.find_voucher_by_id(OTHER_ORG, voucher.pk)
        with self.assertRaises(VoucherNotFoundError):
            voucher_service.find_voucher_by_id(ORG, "not-a-uuid")

    # --------------------------------------------------
    # queries
    # --------------------------------------------------

    def test_list_and_statistics(self):
        posted = post_voucher(make_draft([dr(self.cash, "100.00"), cr(self.revenue, "100.00")]))
        make_draft([dr(self.cash, "40.00"), cr(self.revenue, "40.00")], voucher_type="RV")

        self.assertEqual(list(voucher_service.list_vouchers(ORG, status="posted")), [posted])
        self.assertEqual(voucher_service.list_vouchers(ORG, fiscal_year=2025).count(), 2)
        self.assertEqual(voucher_service.list_vouchers(ORG, search="RV-2025").count(), 1)

        stats = voucher_service.get_voucher_statistics(ORG, fiscal_year="2025")
        self.assertEqual(stats["totals"]["count"], 2)
        self.assertEqual(stats["totals"]["total_amount"], "140.00")
        self.assertEqual(stats["by_type"]["JV"]["posted"], 1)
        self.assertEqual(stats["by_type"]["RV"]["draft"], 1)
