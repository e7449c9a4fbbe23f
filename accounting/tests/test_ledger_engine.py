# accounting/tests/test_ledger_engine.py

from __future__ import annotations

from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher, VoucherLine
from accounting.services.exceptions import (
    AlreadyPostedError,
    AlreadyVoidError,
    BalanceUpdateError,
    GroupAccountPostingError,
    InvalidEntryError,
    NotPostedError,
    VoidedVoucherError,
    VoidReasonTooLongError,
    VoidReasonTooShortError,
)
from accounting.services.ledger_engine import (
    find_ledger_entries_by_account,
    find_ledger_entries_by_voucher,
    post_voucher,
    void_voucher,
)
from accounting.tests.utils import D, ORG, cr, dr, make_account, make_draft, make_user


class LedgerEngineTests(TestCase):
    """
    GUARANTEES:
    - Posting writes one entry per line and moves balances by normal side
    - Posting and voiding are all-or-nothing
    - Voiding never deletes; it marks originals and appends reversals
    - Ledger entries and non-draft vouchers are immutable
    """

    def setUp(self):
        self.user = make_user()
        self.cash = make_account("1101")
        self.revenue = make_account("4001", Account.REVENUE)
        self.rent = make_account("5202", Account.EXPENSE)

    def _sale(self, amount="100.00"):
        return make_draft([dr(self.cash, amount), cr(self.revenue, amount)], user=self.user)

    def _balances(self):
        return {
            a.code: a.current_balance
            for a in Account.objects.filter(pk__in=[self.cash.pk, self.revenue.pk, self.rent.pk])
        }

    # --------------------------------------------------
    # POST
    # --------------------------------------------------

    def test_post_creates_entries_and_moves_balances(self):
        voucher = post_voucher(self._sale("100.00"), self.user)

        self.assertEqual(voucher.status, Voucher.STATUS_POSTED)
        self.assertIsNotNone(voucher.posted_at)
        self.assertEqual(voucher.posted_by, self.user)

        entries = list(find_ledger_entries_by_voucher(voucher))
        self.assertEqual(len(entries), 2)
        debit = next(e for e in entries if e.entry_type == LedgerEntry.DEBIT)
        self.assertEqual(debit.account_id, self.cash.pk)
        self.assertEqual(debit.amount, D("100.00"))
        self.assertEqual(debit.running_balance, D("100.00"))
        self.assertEqual(debit.voucher_number, voucher.voucher_number)
        self.assertEqual(debit.fiscal_period, "2025-01")
        self.assertEqual(debit.status, LedgerEntry.STATUS_ACTIVE)

        # Debit raises an asset; credit raises revenue (credit-normal).
        self.assertEqual(self._balances(), {"1101": D("100.00"), "4001": D("100.00"), "5202": D("0.00")})

    def test_expense_payment_reduces_cash(self):
        post_voucher(self._sale("500.00"), self.user)
        post_voucher(make_draft([dr(self.rent, "200.00"), cr(self.cash, "200.00")]), self.user)

        self.assertEqual(self._balances(), {"1101": D("300.00"), "4001": D("500.00"), "5202": D("200.00")})

        cash_entries = list(find_ledger_entries_by_account(ORG, self.cash))
        self.assertEqual([e.running_balance for e in cash_entries], [D("500.00"), D("300.00")])

    def test_post_twice_is_refused(self):
        voucher = post_voucher(self._sale(), self.user)

        with self.assertRaises(AlreadyPostedError):
            post_voucher(voucher, self.user)

        self.assertEqual(LedgerEntry.objects.filter(voucher=voucher).count(), 2)
        self.assertEqual(self._balances()["1101"], D("100.00"))

    def test_post_revalidates_accounts(self):
        voucher = self._sale()
        self.cash.is_active = False
        self.cash.save()

        with self.assertRaises(InvalidEntryError):
            post_voucher(voucher, self.user)

        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_DRAFT)
        self.assertFalse(LedgerEntry.objects.exists())

    def test_account_turned_group_after_draft_is_refused(self):
        voucher = self._sale()
        Account.objects.filter(pk=self.cash.pk).update(is_group=True)

        with self.assertRaises(GroupAccountPostingError):
            post_voucher(voucher, self.user)

    def test_failed_balance_update_rolls_back_everything(self):
        voucher = self._sale()

        with mock.patch(
            "accounting.services.ledger_engine.adjust_balance",
            side_effect=BalanceUpdateError("boom"),
        ):
            with self.assertRaises(BalanceUpdateError):
                post_voucher(voucher, self.user)

        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_DRAFT)
        self.assertIsNone(voucher.posted_at)
        self.assertFalse(LedgerEntry.objects.exists())
        self.assertEqual(self._balances()["1101"], D("0.00"))

    # --------------------------------------------------
    # VOID
    # --------------------------------------------------

    def test_void_marks_originals_and_appends_reversals(self):
        voucher = post_voucher(self._sale("100.00"), self.user)

        voucher = void_voucher(voucher, self.user, "Entered twice by mistake")

        self.assertEqual(voucher.status, Voucher.STATUS_VOID)
        self.assertEqual(voucher.void_reason, "Entered twice by mistake")
        self.assertIsNotNone(voucher.voided_at)

        originals = LedgerEntry.objects.filter(voucher=voucher, status=LedgerEntry.STATUS_VOID)
        reversals = LedgerEntry.objects.filter(voucher=voucher, status=LedgerEntry.STATUS_REVERSAL)
        self.assertEqual(originals.count(), 2)
        self.assertEqual(reversals.count(), 2)

        for reversal in reversals:
            self.assertNotEqual(reversal.entry_type, reversal.reversal_of.entry_type)
            self.assertEqual(reversal.amount, reversal.reversal_of.amount)
            self.assertEqual(reversal.entry_date, timezone.localdate())

        self.assertEqual(self._balances(), {"1101": D("0.00"), "4001": D("0.00"), "5202": D("0.00")})

    def test_void_draft_is_refused(self):
        with self.assertRaises(NotPostedError):
            void_voucher(self._sale(), self.user, "Not needed anymore")

    def test_void_twice_is_refused(self):
        voucher = void_voucher(post_voucher(self._sale(), self.user), self.user, "Wrong customer")

        with self.assertRaises(AlreadyVoidError):
            void_voucher(voucher, self.user, "Wrong customer again")

        self.assertEqual(LedgerEntry.objects.filter(voucher=voucher).count(), 4)

    def test_void_requires_a_reason(self):
        voucher = post_voucher(self._sale(), self.user)

        with self.assertRaises(VoidReasonTooShortError):
            void_voucher(voucher, self.user, " no ")

        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_POSTED)

    def test_void_reason_longer_than_stored_column_is_refused(self):
        voucher = post_voucher(self._sale(), self.user)

        with self.assertRaises(VoidReasonTooLongError):
            void_voucher(voucher, self.user, "x" * 501)

        voucher.refresh_from_db()
        self.assertEqual(voucher.status, Voucher.STATUS_POSTED)
        self.assertFalse(LedgerEntry.objects.filter(status=LedgerEntry.STATUS_REVERSAL).exists())

        # Exactly at the limit is fine.
        voucher = void_voucher(voucher, self.user, "y" * 500)
        self.assertEqual(len(voucher.void_reason), 500)

    def test_void_voucher_cannot_be_posted_again(self):
        voucher = void_voucher(post_voucher(self._sale(), self.user), self.user, "Duplicate entry")

        with self.assertRaises(VoidedVoucherError):
            post_voucher(voucher, self.user)

    def test_void_entries_are_hidden_from_account_history_by_default(self):
        voucher = post_voucher(self._sale(), self.user)
        void_voucher(voucher, self.user, "Duplicate entry")

        self.assertEqual(find_ledger_entries_by_account(ORG, self.cash).count(), 0)
        self.assertEqual(find_ledger_entries_by_account(ORG, self.cash, include_void=True).count(), 2)

    # --------------------------------------------------
    # IMMUTABILITY
    # --------------------------------------------------

    def test_ledger_entries_are_append_only(self):
        post_voucher(self._sale(), self.user)
        entry = LedgerEntry.objects.first()

        entry.amount = D("1.00")
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_posted_voucher_and_lines_are_frozen(self):
        voucher = post_voucher(self._sale(), self.user)

        voucher.narration = "Rewritten history"
        with self.assertRaises(ValidationError):
            voucher.save()
        with self.assertRaises(ValidationError):
            voucher.delete()

        line = VoucherLine.objects.filter(voucher=voucher).first()
        line.amount = D("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()
