# sales/tests/test_posting.py

from __future__ import annotations

from datetime import date
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.document import PostableDocument
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher
from accounting.services.chart_seed import seed_default_chart
from accounting.services.document_service import create_document, delete_document, update_document
from accounting.services.exceptions import (
    AlreadyPostedError,
    BalanceUpdateError,
    DocumentCancelledError,
    DocumentVoucherError,
    DuplicateDocumentNumberError,
    InvalidDocumentError,
    VoidReasonTooLongError,
    VoidReasonTooShortError,
    VoucherNotEditableError,
)
from accounting.services.ledger_engine import void_voucher
from accounting.services.posting import cancel_document, post_sales_invoice, post_walk_in_sale
from accounting.tests.utils import D, ORG, OTHER_ORG, make_account, make_user
from sales.models import SalesInvoice, WalkInSale


def _entries(voucher):
    return {
        (e.account.code, e.entry_type): e.amount
        for e in LedgerEntry.objects.filter(voucher=voucher).select_related("account")
    }


class SalesInvoicePostingTests(TestCase):
    """
    GUARANTEES:
    - One balanced JV per invoice: Dr receivable, Cr revenue, Cr sales tax
    - Posting twice is refused
    - Cancelling a posted invoice voids its voucher
    """

    def setUp(self):
        self.user = make_user()
        seed_default_chart(ORG)

    def _invoice(self, number="INV-001", **extra):
        data = {
            "invoice_number": number,
            "invoice_date": date(2025, 4, 2),
            "customer_name": "Acme Traders",
            "subtotal": D("1000.00"),
            "total_discount": D("100.00"),
            "total_tax": D("162.00"),
            "shipping_charges": D("38.00"),
        }
        data.update(extra)
        return create_document(SalesInvoice, ORG, user=self.user, **data)

    def test_totals_are_derived(self):
        invoice = self._invoice()

        self.assertEqual(invoice.taxable_amount, D("900.00"))
        self.assertEqual(invoice.total_amount, D("1100.00"))
        self.assertEqual(invoice.status, PostableDocument.STATUS_DRAFT)

    def test_post_creates_balanced_journal_voucher(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)

        self.assertEqual(invoice.status, PostableDocument.STATUS_POSTED)
        self.assertTrue(invoice.is_posted)
        self.assertEqual(invoice.posted_by, self.user)

        voucher = invoice.voucher
        self.assertEqual(voucher.status, Voucher.STATUS_POSTED)
        self.assertEqual(voucher.voucher_type, Voucher.TYPE_JOURNAL)
        self.assertEqual(voucher.voucher_date, date(2025, 4, 2))
        self.assertEqual(voucher.reference_type, Voucher.REF_INVOICE)
        self.assertEqual(voucher.reference_id, str(invoice.pk))
        self.assertEqual(voucher.reference_number, "INV-001")
        self.assertEqual(voucher.total_debit, D("1100.00"))

        self.assertEqual(
            _entries(voucher),
            {
                ("1200", "DEBIT"): D("1100.00"),
                ("4001", "CREDIT"): D("938.00"),
                ("2102", "CREDIT"): D("162.00"),
            },
        )

        # Accounts actually used are recorded on the invoice.
        self.assertEqual(invoice.receivable_account.code, "1200")
        self.assertEqual(invoice.tax_account.code, "2102")

    def test_zero_tax_invoice_has_no_tax_line(self):
        invoice = post_sales_invoice(self._invoice(total_tax=D("0.00")), actor=self.user)

        self.assertEqual(invoice.voucher.lines.count(), 2)
        self.assertIsNone(invoice.tax_account)

    def test_override_account_is_used(self):
        service = Account.objects.get(organization_id=ORG, code="4002")
        invoice = post_sales_invoice(self._invoice(revenue_account=service), actor=self.user)

        self.assertIn(("4002", "CREDIT"), _entries(invoice.voucher))

    def test_posting_twice_is_refused(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)

        with self.assertRaises(AlreadyPostedError):
            post_sales_invoice(invoice, actor=self.user)

        self.assertEqual(Voucher.objects.filter(reference_id=str(invoice.pk)).count(), 1)

    def test_failed_post_leaves_invoice_as_draft(self):
        invoice = self._invoice()

        with mock.patch(
            "accounting.services.ledger_engine.adjust_balance",
            side_effect=BalanceUpdateError("boom"),
        ):
            with self.assertRaises(BalanceUpdateError):
                post_sales_invoice(invoice, actor=self.user)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, PostableDocument.STATUS_DRAFT)
        self.assertIsNone(invoice.voucher_id)
        self.assertFalse(Voucher.objects.exists())

    def test_cancel_posted_invoice_voids_voucher(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)

        with self.assertRaises(VoidReasonTooShortError):
            cancel_document(invoice, actor=self.user, reason="")

        invoice = cancel_document(invoice, actor=self.user, reason="Customer cancelled the order")

        self.assertEqual(invoice.status, PostableDocument.STATUS_CANCELLED)
        self.assertEqual(invoice.voucher.status, Voucher.STATUS_VOID)
        receivable = Account.objects.get(organization_id=ORG, code="1200")
        self.assertEqual(receivable.current_balance, D("0.00"))

        with self.assertRaises(DocumentCancelledError):
            post_sales_invoice(invoice, actor=self.user)
        with self.assertRaises(DocumentCancelledError):
            cancel_document(invoice, actor=self.user, reason="Again")

    def test_cancel_draft_needs_no_voucher(self):
        invoice = cancel_document(self._invoice(), actor=self.user)

        self.assertEqual(invoice.status, PostableDocument.STATUS_CANCELLED)
        self.assertFalse(Voucher.objects.exists())

    def test_document_voucher_cannot_be_voided_directly(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)

        with self.assertRaises(DocumentVoucherError):
            void_voucher(invoice.voucher, self.user, "Voiding behind the invoice")

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, PostableDocument.STATUS_POSTED)
        self.assertEqual(invoice.voucher.status, Voucher.STATUS_POSTED)

        invoice = cancel_document(invoice, actor=self.user, reason="Customer cancelled the order")
        self.assertEqual(invoice.status, PostableDocument.STATUS_CANCELLED)
        self.assertEqual(invoice.voucher.status, Voucher.STATUS_VOID)

    def test_cancel_finishes_when_voucher_is_already_void(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)
        void_voucher(invoice.voucher, self.user, "Reversed before cancel", source_document=invoice)

        invoice = cancel_document(invoice, actor=self.user, reason="Customer cancelled the order")

        self.assertEqual(invoice.status, PostableDocument.STATUS_CANCELLED)
        self.assertEqual(LedgerEntry.objects.filter(status=LedgerEntry.STATUS_REVERSAL).count(), 3)
        receivable = Account.objects.get(organization_id=ORG, code="1200")
        self.assertEqual(receivable.current_balance, D("0.00"))

    def test_cancel_reason_longer_than_stored_column_is_refused(self):
        posted = post_sales_invoice(self._invoice(), actor=self.user)
        draft = self._invoice("INV-002")

        with self.assertRaises(VoidReasonTooLongError):
            cancel_document(posted, actor=self.user, reason="x" * 501)
        with self.assertRaises(VoidReasonTooLongError):
            cancel_document(draft, actor=self.user, reason="x" * 501)

        posted.refresh_from_db()
        draft.refresh_from_db()
        self.assertEqual(posted.status, PostableDocument.STATUS_POSTED)
        self.assertEqual(posted.voucher.status, Voucher.STATUS_POSTED)
        self.assertEqual(draft.status, PostableDocument.STATUS_DRAFT)


class DocumentDraftTests(TestCase):
    def setUp(self):
        self.user = make_user()

    def _invoice(self, number="INV-100", organization_id=ORG, **extra):
        data = {"invoice_number": number, "customer_name": "Beta Stores", "subtotal": D("500.00")}
        data.update(extra)
        return create_document(SalesInvoice, organization_id, user=self.user, **data)

    def test_duplicate_number_in_organization_is_rejected(self):
        self._invoice()

        with self.assertRaises(DuplicateDocumentNumberError):
            self._invoice()

        self._invoice(organization_id=OTHER_ORG)

    def test_invalid_amounts_are_rejected(self):
        with self.assertRaises(InvalidDocumentError):
            self._invoice(total_discount=D("600.00"))
        with self.assertRaises(InvalidDocumentError):
            self._invoice(subtotal=D("0.00"))

    def test_lifecycle_fields_cannot_be_set(self):
        with self.assertRaises(InvalidDocumentError):
            self._invoice(status=PostableDocument.STATUS_POSTED)
        with self.assertRaises(InvalidDocumentError):
            self._invoice(total_amount=D("1.00"))

    def test_account_of_another_organization_is_rejected(self):
        foreign = make_account("4001", Account.REVENUE, organization_id=OTHER_ORG)

        with self.assertRaises(InvalidDocumentError):
            self._invoice(revenue_account=foreign)

    def test_update_and_delete_only_while_draft(self):
        invoice = self._invoice()

        invoice = update_document(invoice, customer_name="Beta Stores Ltd", total_tax=D("90.00"))
        self.assertEqual(invoice.total_amount, D("590.00"))

        post_sales_invoice(invoice, actor=self.user)
        with self.assertRaises(VoucherNotEditableError):
            update_document(invoice, subtotal=D("1.00"))
        with self.assertRaises(VoucherNotEditableError):
            delete_document(invoice)

    def test_delete_draft_removes_row(self):
        invoice = self._invoice()
        delete_document(invoice, user=self.user)
        self.assertFalse(SalesInvoice.objects.exists())

    def test_posted_amounts_are_frozen_at_model_level(self):
        invoice = post_sales_invoice(self._invoice(), actor=self.user)

        invoice.subtotal = D("1.00")
        with self.assertRaises(ValidationError):
            invoice.save()


class WalkInSalePostingTests(TestCase):
    def setUp(self):
        self.user = make_user()

    def _sale(self, **extra):
        data = {
            "sale_number": "WS-001",
            "sale_date": date(2025, 5, 9),
            "subtotal": D("200.00"),
            "total_tax": D("36.00"),
            "other_charges": D("4.00"),
        }
        data.update(extra)
        return create_document(WalkInSale, ORG, user=self.user, **data)

    def test_post_creates_receipt_voucher_with_default_accounts(self):
        sale = post_walk_in_sale(self._sale(), actor=self.user)

        voucher = sale.voucher
        self.assertEqual(voucher.voucher_type, Voucher.TYPE_RECEIPT)
        self.assertEqual(voucher.voucher_number, "RV-2025-0001")
        self.assertEqual(voucher.reference_type, Voucher.REF_WALK_IN_SALE)
        self.assertIn("Walk-in Customer", voucher.narration)

        # No chart seeded: default accounts are created on first use.
        self.assertEqual(
            _entries(voucher),
            {
                ("1-110", "DEBIT"): D("240.00"),
                ("4-100", "CREDIT"): D("204.00"),
                ("2-110", "CREDIT"): D("36.00"),
            },
        )

        cash = Account.objects.get(organization_id=ORG, code="1-110")
        self.assertEqual(cash.current_balance, D("240.00"))

    def test_walk_in_sale_rejects_shipping(self):
        with self.assertRaises(InvalidDocumentError):
            self._sale(shipping_charges=D("10.00"))
