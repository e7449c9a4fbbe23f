# PATH: accounting/services/account_registry.py

"""
PATH: accounting/services/account_registry.py

ACCOUNT REGISTRY (AUTHORITATIVE)

This module answers two questions for the ledger:
- "Which account is this?"            (lookup by id / code, org-scoped)
- "How does an entry move its balance?" (balance_delta / adjust_balance)

Semantic default accounts:
- Posting code never hardcodes a single code. It asks for a semantic key
  (PURCHASES, ACCOUNTS_PAYABLE, ...) and gets the organization's account,
  created on first use when the chart has none.
- Lookup tries the preferred code first, then the codes the seeded
  default chart uses for the same purpose.

Balance rules:
- DEBIT entry increases DEBIT-normal accounts (ASSET, EXPENSE)
  and decreases CREDIT-normal accounts (LIABILITY, EQUITY, REVENUE)
- CREDIT entry does the inverse
- current_balance only ever moves through adjust_balance (F() increment)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F

from accounting.models.account import Account
from accounting.models.voucher import EntryType
from accounting.services.exceptions import (
    AccountNotFoundError,
    BalanceUpdateError,
    InvalidAccountError,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# SEMANTIC DEFAULT ACCOUNTS
# ------------------------------------------------------------


@dataclass(frozen=True)
class DefaultAccountSpec:
    code: str
    name: str
    account_type: str
    category: str
    fallback_codes: tuple[str, ...] = ()
    is_tax_account: bool = False
    is_bank_account: bool = False


PURCHASES = "PURCHASES"
ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
INPUT_TAX = "INPUT_TAX"
CASH_IN_HAND = "CASH_IN_HAND"
ACCOUNTS_RECEIVABLE = "ACCOUNTS_RECEIVABLE"
SALES_REVENUE = "SALES_REVENUE"
SALES_TAX_PAYABLE = "SALES_TAX_PAYABLE"

DEFAULT_ACCOUNTS: dict[str, DefaultAccountSpec] = {
    PURCHASES: DefaultAccountSpec(
        code="5-100",
        name="Purchases",
        account_type=Account.EXPENSE,
        category="cost_of_goods_sold",
        fallback_codes=("5101",),
    ),
    ACCOUNTS_PAYABLE: DefaultAccountSpec(
        code="2-100",
        name="Accounts Payable",
        account_type=Account.LIABILITY,
        category="current_liability",
        fallback_codes=("2101",),
    ),
    INPUT_TAX: DefaultAccountSpec(
        code="1-140",
        name="Input Sales Tax",
        account_type=Account.ASSET,
        category="current_asset",
        is_tax_account=True,
    ),
    CASH_IN_HAND: DefaultAccountSpec(
        code="1-110",
        name="Cash in Hand",
        account_type=Account.ASSET,
        category="current_asset",
        fallback_codes=("1101",),
    ),
    ACCOUNTS_RECEIVABLE: DefaultAccountSpec(
        code="1-130",
        name="Accounts Receivable",
        account_type=Account.ASSET,
        category="current_asset",
        fallback_codes=("1200",),
    ),
    SALES_REVENUE: DefaultAccountSpec(
        code="4-100",
        name="Sales Revenue",
        account_type=Account.REVENUE,
        category="sales_revenue",
        fallback_codes=("4001",),
    ),
    SALES_TAX_PAYABLE: DefaultAccountSpec(
        code="2-110",
        name="Sales Tax Payable",
        account_type=Account.LIABILITY,
        category="current_liability",
        fallback_codes=("2102",),
        is_tax_account=True,
    ),
}


def _norm_code(code: str) -> str:
    return (code or "").strip().upper()


# ============================================================
# LOOKUPS
# ============================================================


def find_account_by_id(organization_id: str, account_id, *, include_deleted: bool = False) -> Account:
    manager = Account.objects if include_deleted else Account.active_objects
    try:
        return manager.get(organization_id=organization_id, pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError, ValidationError) as exc:
        raise AccountNotFoundError(f"Account {account_id} not found") from exc


def find_account_by_code(organization_id: str, code: str) -> Account | None:
    code = _norm_code(code)
    if not code:
        return None
    return Account.active_objects.filter(organization_id=organization_id, code=code).first()


def _find_default(organization_id: str, spec: DefaultAccountSpec) -> Account | None:
    for code in (spec.code, *spec.fallback_codes):
        account = find_account_by_code(organization_id, code)
        if account is not None and not account.is_group:
            return account
    return None


def find_or_create_default_account(organization_id: str, key: str, *, user=None) -> Account:
    """
    Resolve the organization's account for a semantic purpose.

    Creates a root leaf system account under the preferred code when the
    organization has none. A concurrent creator winning the unique
    (organization_id, code) race is treated as success and re-read.
    """
    try:
        spec = DEFAULT_ACCOUNTS[key]
    except KeyError as exc:
        raise InvalidAccountError(f"Unknown default account key: {key}") from exc

    account = _find_default(organization_id, spec)
    if account is not None:
        return account

    try:
        with transaction.atomic():
            account = Account.objects.create(
                organization_id=organization_id,
                code=spec.code,
                name=spec.name,
                account_type=spec.account_type,
                category=spec.category,
                is_system_account=True,
                is_tax_account=spec.is_tax_account,
                is_bank_account=spec.is_bank_account,
                created_by=user,
            )
    except (IntegrityError, ValidationError):
        account = _find_default(organization_id, spec)
        if account is None:
            raise InvalidAccountError(
                f"Default account {spec.code} ({key}) exists but cannot receive postings"
            )
        return account

    logger.info(
        "Default account created",
        extra={"organization_id": organization_id, "key": key, "code": account.code},
    )
    return account


# ============================================================
# BALANCE MATH
# ============================================================


def balance_delta(account: Account, entry_type: str, amount: Decimal) -> Decimal:
    """Signed change an entry applies to the account's normal-balance figure."""
    normal = account.normal_balance or Account.normal_balance_for(account.account_type)
    if (entry_type == EntryType.DEBIT) == (normal == Account.DEBIT):
        return amount
    return -amount


def lock_accounts(account_ids) -> dict:
    """
    Row-lock the given accounts in pk order (deadlock-free ordering).
    Must run inside transaction.atomic().
    """
    ids = sorted({a for a in account_ids if a is not None})
    rows = Account.objects.select_for_update().filter(pk__in=ids).order_by("pk")
    return {a.pk: a for a in rows}


def adjust_balance(account_id, signed_delta: Decimal) -> Decimal:
    """
    Atomically add signed_delta to current_balance and return the new value.

    Lost updates are impossible: the increment runs in SQL (F expression).
    """
    updated = Account.objects.filter(pk=account_id).update(
        current_balance=F("current_balance") + signed_delta
    )
    if updated != 1:
        raise BalanceUpdateError(f"Balance update for account {account_id} affected {updated} rows")

    return Account.objects.values_list("current_balance", flat=True).get(pk=account_id)
