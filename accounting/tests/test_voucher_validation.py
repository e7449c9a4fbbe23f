# accounting/tests/test_voucher_validation.py

from __future__ import annotations

from django.test import TestCase

from accounting.models.account import Account
from accounting.services.exceptions import (
    GroupAccountPostingError,
    ImbalancedVoucherError,
    InsufficientEntriesError,
    InvalidEntryError,
)
from accounting.services.voucher_validation import (
    ACCOUNT_INACTIVE,
    ACCOUNT_NOT_FOUND,
    BOTH_SIDES,
    DUPLICATE_ACCOUNT,
    IMBALANCED,
    NO_SIDE,
    LineDraft,
    assert_double_entry,
    compute_totals,
    money,
    validate_double_entry,
)
from accounting.tests.utils import D, ORG, OTHER_ORG, make_account


class DoubleEntryValidationTests(TestCase):
    """
    GUARANTEES:
    - At least two entries with both sides present
    - Exactly one side per entry
    - Only active leaf accounts of the same organization
    - Debits equal credits within 0.01
    """

    def setUp(self):
        self.cash = make_account("1101")
        self.bank = make_account("1102")
        self.revenue = make_account("4001", Account.REVENUE)
        self.group = make_account("1000", is_group=True)

    def _codes(self, lines):
        return {e.code for e in validate_double_entry(lines, organization_id=ORG).errors}

    # --------------------------------------------------
    # Valid
    # --------------------------------------------------

    def test_balanced_voucher_is_valid(self):
        result = validate_double_entry(
            [
                LineDraft(self.cash, debit=D("60.00")),
                LineDraft(self.bank, debit=D("40.00")),
                LineDraft(self.revenue, credit=D("100.00")),
            ],
            organization_id=ORG,
        )

        self.assertTrue(result.is_valid)
        self.assertEqual(result.totals.total_debit, D("100.00"))
        self.assertEqual(result.totals.total_credit, D("100.00"))
        self.assertEqual(result.totals.difference, D("0.00"))

    def test_compute_totals_rounds_to_cents(self):
        totals = compute_totals(
            [
                LineDraft(self.cash, debit=D("10.005")),
                LineDraft(self.revenue, credit=D("10.01")),
            ]
        )
        self.assertEqual(totals.total_debit, D("10.01"))
        self.assertTrue(totals.is_balanced)

    # --------------------------------------------------
    # Structure
    # --------------------------------------------------

    def test_single_entry_is_insufficient(self):
        with self.assertRaises(InsufficientEntriesError):
            assert_double_entry([LineDraft(self.cash, debit=D("100.00"))], organization_id=ORG)

    def test_missing_credit_side_is_insufficient(self):
        with self.assertRaises(InsufficientEntriesError):
            assert_double_entry(
                [LineDraft(self.cash, debit=D("50.00")), LineDraft(self.bank, debit=D("50.00"))],
                organization_id=ORG,
            )

    def test_one_cent_difference_is_imbalanced(self):
        lines = [LineDraft(self.cash, debit=D("100.00")), LineDraft(self.revenue, credit=D("99.99"))]

        self.assertEqual(self._codes(lines), {IMBALANCED})
        with self.assertRaises(ImbalancedVoucherError):
            assert_double_entry(lines, organization_id=ORG)

    def test_entry_with_both_sides_is_rejected(self):
        lines = [
            LineDraft(self.cash, debit=D("100.00"), credit=D("100.00")),
            LineDraft(self.revenue, credit=D("100.00")),
        ]
        self.assertIn(BOTH_SIDES, self._codes(lines))
        with self.assertRaises(InvalidEntryError):
            assert_double_entry(lines, organization_id=ORG)

    def test_entry_with_no_amount_is_rejected(self):
        lines = [
            LineDraft(self.cash, debit=D("100.00")),
            LineDraft(self.bank),
            LineDraft(self.revenue, credit=D("100.00")),
        ]
        result = validate_double_entry(lines, organization_id=ORG)

        issue = next(e for e in result.errors if e.code == NO_SIDE)
        self.assertEqual(issue.line, 2)
        self.assertEqual(issue.as_dict()["field"], "entries[1]")

    def test_duplicate_account_on_same_side_is_rejected(self):
        lines = [
            LineDraft(self.cash, debit=D("50.00")),
            LineDraft(self.cash, debit=D("50.00")),
            LineDraft(self.revenue, credit=D("100.00")),
        ]
        self.assertEqual(self._codes(lines), {DUPLICATE_ACCOUNT})

    # --------------------------------------------------
    # Accounts
    # --------------------------------------------------

    def test_group_account_cannot_receive_postings(self):
        with self.assertRaises(GroupAccountPostingError):
            assert_double_entry(
                [LineDraft(self.group, debit=D("100.00")), LineDraft(self.revenue, credit=D("100.00"))],
                organization_id=ORG,
            )

    def test_inactive_account_is_rejected(self):
        self.cash.is_active = False
        self.cash.save()

        lines = [LineDraft(self.cash, debit=D("100.00")), LineDraft(self.revenue, credit=D("100.00"))]
        self.assertEqual(self._codes(lines), {ACCOUNT_INACTIVE})

    def test_account_of_another_organization_is_not_found(self):
        foreign = make_account("1101", organization_id=OTHER_ORG)

        lines = [LineDraft(foreign, debit=D("100.00")), LineDraft(self.revenue, credit=D("100.00"))]
        self.assertEqual(self._codes(lines), {ACCOUNT_NOT_FOUND})

    def test_unknown_account_reference_is_reported(self):
        lines = [
            LineDraft(None, debit=D("100.00"), account_ref=999999),
            LineDraft(self.revenue, credit=D("100.00")),
        ]
        result = validate_double_entry(lines, organization_id=ORG)

        self.assertFalse(result.is_valid)
        self.assertIn("999999", result.messages[0])

    def test_invalid_money_value_raises(self):
        with self.assertRaises(InvalidEntryError):
            money("ten dollars")
        with self.assertRaises(InvalidEntryError):
            money("NaN")
