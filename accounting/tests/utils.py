# accounting/tests/utils.py

"""
Shared fixtures for accounting, sales and purchases tests.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model

from accounting.models.account import Account
from accounting.services.ledger_engine import post_voucher
from accounting.services.voucher_service import create_draft

ORG = "org-test"
OTHER_ORG = "org-other"

User = get_user_model()


def D(value) -> Decimal:
    return Decimal(str(value))


def make_user(username="accountant", *, superuser=False):
    if superuser:
        return User.objects.create_superuser(username=username, email=f"{username}@example.com", password="pass")
    return User.objects.create_user(username=username, email=f"{username}@example.com", password="pass")


def make_account(code, account_type=Account.ASSET, *, organization_id=ORG, **extra):
    extra.setdefault("name", f"Account {code}")
    return Account.objects.create(
        organization_id=organization_id,
        code=code,
        account_type=account_type,
        **extra,
    )


def dr(account, amount, description=""):
    return {"account": account.pk, "debit": D(amount), "description": description}


def cr(account, amount, description=""):
    return {"account": account.pk, "credit": D(amount), "description": description}


def make_draft(lines, *, voucher_type="JV", voucher_date=date(2025, 1, 15), narration="Test voucher entry", user=None):
    return create_draft(
        organization_id=ORG,
        voucher_type=voucher_type,
        voucher_date=voucher_date,
        narration=narration,
        lines=lines,
        user=user,
    )


def make_posted(lines, *, user=None, **kwargs):
    return post_voucher(make_draft(lines, user=user, **kwargs), user)
