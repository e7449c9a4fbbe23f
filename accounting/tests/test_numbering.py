# accounting/tests/test_numbering.py

from __future__ import annotations

from datetime import date
from unittest import mock

from django.test import TestCase, override_settings

from accounting.models.account import Account
from accounting.models.sequence import VoucherSequence
from accounting.models.voucher import Voucher
from accounting.services.exceptions import DuplicateVoucherNumberError, InvalidEntryError
from accounting.services.ledger_engine import post_voucher, void_voucher
from accounting.services.numbering import allocate_voucher_number, generate_voucher_number
from accounting.services.voucher_service import delete_draft
from accounting.tests.utils import ORG, OTHER_ORG, cr, dr, make_account, make_draft


def _unsaved_voucher(voucher_date=date(2025, 3, 1)):
    return Voucher(
        organization_id=ORG,
        voucher_type=Voucher.TYPE_JOURNAL,
        voucher_date=voucher_date,
        narration="Numbering test voucher",
    )


class VoucherNumberingTests(TestCase):
    def test_numbers_are_sequential_per_scope(self):
        self.assertEqual(generate_voucher_number(ORG, "JV", "2025"), "JV-2025-0001")
        self.assertEqual(generate_voucher_number(ORG, "JV", "2025"), "JV-2025-0002")

        # Every (organization, type, fiscal year) has its own counter.
        self.assertEqual(generate_voucher_number(ORG, "PV", "2025"), "PV-2025-0001")
        self.assertEqual(generate_voucher_number(ORG, "JV", "2026"), "JV-2026-0001")
        self.assertEqual(generate_voucher_number(OTHER_ORG, "JV", "2025"), "JV-2025-0001")

        seq = VoucherSequence.objects.get(organization_id=ORG, voucher_type="JV", fiscal_year="2025")
        self.assertEqual(seq.last_number, 2)

    def test_unknown_voucher_type_is_rejected(self):
        with self.assertRaises(InvalidEntryError):
            generate_voucher_number(ORG, "XX", "2025")

    def test_new_counter_continues_after_highest_existing_number(self):
        existing = _unsaved_voucher()
        existing.voucher_number = "JV-2025-0007"
        existing.save()

        self.assertEqual(generate_voucher_number(ORG, "JV", "2025"), "JV-2025-0008")

    def test_allocate_skips_a_number_already_taken(self):
        taken = _unsaved_voucher()
        taken.voucher_number = "JV-2025-0001"
        taken.save()
        VoucherSequence.objects.create(organization_id=ORG, voucher_type="JV", fiscal_year="2025", last_number=0)

        voucher = allocate_voucher_number(_unsaved_voucher())

        self.assertEqual(voucher.voucher_number, "JV-2025-0002")
        self.assertTrue(Voucher.objects.filter(pk=voucher.pk).exists())

    @override_settings(VOUCHER_NUMBER_MAX_RETRIES=2)
    def test_allocate_gives_up_after_max_retries(self):
        taken = _unsaved_voucher()
        taken.voucher_number = "JV-2025-0001"
        taken.save()

        with mock.patch(
            "accounting.services.numbering.generate_voucher_number",
            return_value="JV-2025-0001",
        ) as generate:
            with self.assertRaises(DuplicateVoucherNumberError):
                allocate_voucher_number(_unsaved_voucher())

        self.assertEqual(generate.call_count, 2)
        self.assertEqual(Voucher.objects.filter(organization_id=ORG).count(), 1)

    def test_numbers_are_not_reused_after_delete(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)

        first = make_draft([dr(cash, "10.00"), cr(revenue, "10.00")])
        delete_draft(first)
        second = make_draft([dr(cash, "10.00"), cr(revenue, "10.00")])

        self.assertEqual(first.voucher_number, "JV-2025-0001")
        self.assertEqual(second.voucher_number, "JV-2025-0002")

    def test_numbers_are_not_reused_after_void(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)

        first = post_voucher(make_draft([dr(cash, "10.00"), cr(revenue, "10.00")]))
        void_voucher(first, None, "Entered twice by mistake")
        second = make_draft([dr(cash, "10.00"), cr(revenue, "10.00")])

        self.assertEqual(first.voucher_number, "JV-2025-0001")
        self.assertEqual(second.voucher_number, "JV-2025-0002")
        self.assertEqual(Voucher.objects.get(pk=first.pk).voucher_number, "JV-2025-0001")

    def test_fiscal_year_comes_from_voucher_date(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)

        voucher = make_draft(
            [dr(cash, "10.00"), cr(revenue, "10.00")],
            voucher_type="RV",
            voucher_date=date(2024, 12, 31),
        )

        self.assertEqual(voucher.voucher_number, "RV-2024-0001")
        self.assertEqual(voucher.fiscal_year, "2024")
        self.assertEqual(voucher.fiscal_period, "2024-12")
