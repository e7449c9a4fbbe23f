# accounting/tests/test_accounts.py

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.models.account import Account
from accounting.services import account_registry as registry
from accounting.services.account_service import (
    create_account,
    delete_account,
    get_account_tree,
    update_account,
)
from accounting.services.chart_seed import DEFAULT_CHART, seed_default_chart
from accounting.services.exceptions import (
    AccountInUseError,
    AccountNotFoundError,
    DuplicateAccountCodeError,
    InvalidAccountError,
)
from accounting.tests.utils import D, ORG, OTHER_ORG, cr, dr, make_account, make_posted


class AccountServiceTests(TestCase):
    def test_create_normalizes_code_and_derives_normal_balance(self):
        account = create_account(
            ORG,
            code=" 2101 ",
            name="Accounts Payable",
            account_type=Account.LIABILITY,
            category="current_liability",
            opening_balance="1500.00",
        )

        self.assertEqual(account.code, "2101")
        self.assertEqual(account.normal_balance, Account.CREDIT)
        self.assertEqual(account.level, 1)
        self.assertEqual(account.opening_balance, D("1500.00"))
        self.assertEqual(account.current_balance, D("1500.00"))

    def test_duplicate_code_in_same_organization_is_rejected(self):
        create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET)

        with self.assertRaises(DuplicateAccountCodeError):
            create_account(ORG, code="1101", name="Cash again", account_type=Account.ASSET)

        # Codes are per organization.
        create_account(OTHER_ORG, code="1101", name="Cash", account_type=Account.ASSET)

    def test_category_must_match_type(self):
        with self.assertRaises(InvalidAccountError):
            create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET, category="sales_revenue")

    def test_balance_fields_are_not_accepted(self):
        with self.assertRaises(InvalidAccountError):
            create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET, current_balance="10.00")

    def test_child_turns_parent_into_group(self):
        parent = create_account(ORG, code="1100", name="Current Assets", account_type=Account.ASSET)
        child = create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET, parent=parent.pk)

        parent.refresh_from_db()
        self.assertTrue(parent.is_group)
        self.assertEqual(child.level, 2)
        self.assertEqual(child.parent_id, parent.pk)

    def test_child_must_share_parent_type(self):
        parent = create_account(ORG, code="1100", name="Current Assets", account_type=Account.ASSET)

        with self.assertRaises(InvalidAccountError):
            create_account(ORG, code="4001", name="Sales", account_type=Account.REVENUE, parent=parent)

    def test_account_with_postings_cannot_become_group(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)
        make_posted([dr(cash, "10.00"), cr(revenue, "10.00")])

        with self.assertRaises(AccountInUseError):
            create_account(ORG, code="1101-A", name="Till", account_type=Account.ASSET, parent=cash)

    def test_system_account_only_allows_cosmetic_changes(self):
        account = make_account("1101", is_system_account=True)

        renamed = update_account(account, name="Main Cash")
        self.assertEqual(renamed.name, "Main Cash")

        with self.assertRaises(AccountInUseError):
            update_account(account, code="1199")

    def test_code_is_frozen_once_account_has_history(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)
        make_posted([dr(cash, "10.00"), cr(revenue, "10.00")])

        with self.assertRaises(AccountInUseError):
            update_account(cash, code="1109")

        # Same value is not a change.
        self.assertEqual(update_account(cash, code="1101").code, "1101")

    def test_update_never_touches_current_balance(self):
        cash = make_account("1101")
        revenue = make_account("4001", Account.REVENUE)
        make_posted([dr(cash, "10.00"), cr(revenue, "10.00")])

        stale = Account.objects.get(pk=cash.pk)
        stale.current_balance = D("0.00")
        stale.description = "Front desk till"
        stale.save()

        cash.refresh_from_db()
        self.assertEqual(cash.current_balance, D("10.00"))
        self.assertEqual(cash.description, "Front desk till")

    def test_delete_rules(self):
        parent = create_account(ORG, code="1100", name="Current Assets", account_type=Account.ASSET)
        child = create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET, parent=parent)
        funded = create_account(ORG, code="1102", name="Bank", account_type=Account.ASSET, opening_balance="5.00")
        system = make_account("1103", is_system_account=True)

        with self.assertRaises(AccountInUseError):
            delete_account(parent)
        with self.assertRaises(AccountInUseError):
            delete_account(funded)
        with self.assertRaises(AccountInUseError):
            delete_account(system)

        deleted = delete_account(child)
        self.assertTrue(deleted.is_deleted)
        self.assertFalse(deleted.is_active)
        self.assertFalse(Account.active_objects.filter(pk=child.pk).exists())

        # Soft-deleted codes stay reserved.
        with self.assertRaises(DuplicateAccountCodeError):
            create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET)

    def test_account_tree_nests_children(self):
        root = create_account(ORG, code="1000", name="Assets", account_type=Account.ASSET)
        current = create_account(ORG, code="1100", name="Current Assets", account_type=Account.ASSET, parent=root)
        create_account(ORG, code="1101", name="Cash", account_type=Account.ASSET, parent=current)
        create_account(ORG, code="4001", name="Sales", account_type=Account.REVENUE)

        tree = get_account_tree(ORG)
        self.assertEqual([n["code"] for n in tree], ["1000", "4001"])
        self.assertEqual(tree[0]["children"][0]["code"], "1100")
        self.assertEqual(tree[0]["children"][0]["children"][0]["code"], "1101")

        assets_only = get_account_tree(ORG, account_type=Account.ASSET)
        self.assertEqual(len(assets_only), 1)


class AccountRegistryTests(TestCase):
    def test_lookup_is_scoped_to_organization(self):
        account = make_account("1101", organization_id=OTHER_ORG)

        with self.assertRaises(AccountNotFoundError):
            registry.find_account_by_id(ORG, account.pk)
        self.assertIsNone(registry.find_account_by_code(ORG, "1101"))
        self.assertEqual(registry.find_account_by_code(OTHER_ORG, " 1101 "), account)

    def test_balance_delta_follows_normal_side(self):
        cash = make_account("1101")
        payable = make_account("2101", Account.LIABILITY)

        self.assertEqual(registry.balance_delta(cash, "DEBIT", D("5.00")), D("5.00"))
        self.assertEqual(registry.balance_delta(cash, "CREDIT", D("5.00")), D("-5.00"))
        self.assertEqual(registry.balance_delta(payable, "CREDIT", D("5.00")), D("5.00"))
        self.assertEqual(registry.balance_delta(payable, "DEBIT", D("5.00")), D("-5.00"))

    def test_default_account_is_created_once(self):
        first = registry.find_or_create_default_account(ORG, registry.PURCHASES)
        second = registry.find_or_create_default_account(ORG, registry.PURCHASES)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.code, "5-100")
        self.assertEqual(first.account_type, Account.EXPENSE)
        self.assertTrue(first.is_system_account)

    def test_default_account_prefers_seeded_chart(self):
        seed_default_chart(ORG)

        account = registry.find_or_create_default_account(ORG, registry.ACCOUNTS_PAYABLE)
        self.assertEqual(account.code, "2101")

    def test_unknown_default_key_is_rejected(self):
        with self.assertRaises(InvalidAccountError):
            registry.find_or_create_default_account(ORG, "PETTY_CASH")


class ChartSeedTests(TestCase):
    def test_seed_creates_hierarchy(self):
        summary = seed_default_chart(ORG)

        self.assertEqual(summary["created"], len(DEFAULT_CHART))
        self.assertEqual(summary["total"], len(DEFAULT_CHART))

        cash = Account.objects.get(organization_id=ORG, code="1101")
        self.assertEqual(cash.parent.code, "1100")
        self.assertEqual(cash.level, 3)
        self.assertFalse(cash.is_group)
        self.assertTrue(Account.objects.get(organization_id=ORG, code="1000").is_group)

    def test_seed_is_idempotent(self):
        seed_default_chart(ORG)
        summary = seed_default_chart(ORG)

        self.assertEqual(summary["created"], 0)
        self.assertEqual(summary["existing"], len(DEFAULT_CHART))
        self.assertEqual(Account.objects.filter(organization_id=ORG).count(), len(DEFAULT_CHART))

    def test_management_command(self):
        out = StringIO()
        call_command("seed_default_chart", "--organization", "org-cli", stdout=out)

        self.assertIn("created", out.getvalue())
        self.assertEqual(Account.objects.filter(organization_id="org-cli").count(), len(DEFAULT_CHART))
