# accounting/services/account_service.py

"""
======================================================
PATH: accounting/services/account_service.py
======================================================
ACCOUNT MASTER DATA (CHART OF ACCOUNTS CRUD)

Rules:
- code is unique per organization (including soft-deleted rows)
- adding a child turns the parent into a group account; an account that
  already carries postings cannot become a group
- children share the parent's account type
- current_balance starts at opening_balance and is never edited here
- system accounts: only name, description and is_active may change
- code / account_type / parent are frozen once the account has ledger history
- soft delete refuses system accounts, accounts with children and
  accounts with a non-zero balance
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.services.account_registry import find_account_by_id
from accounting.services.exceptions import (
    AccountInUseError,
    DuplicateAccountCodeError,
    InvalidAccountError,
)
from accounting.services.voucher_validation import money

logger = logging.getLogger(__name__)

CREATE_FIELDS = {
    "code",
    "name",
    "description",
    "account_type",
    "category",
    "parent",
    "opening_balance",
    "is_tax_account",
    "tax_rate",
    "is_bank_account",
    "is_active",
}
SYSTEM_EDITABLE_FIELDS = {"name", "description", "is_active"}
EDITABLE_FIELDS = SYSTEM_EDITABLE_FIELDS | {
    "code",
    "category",
    "account_type",
    "parent",
    "is_tax_account",
    "tax_rate",
    "is_bank_account",
}
HISTORY_LOCKED_FIELDS = {"code", "account_type", "parent"}


def _invalid(exc: ValidationError) -> InvalidAccountError:
    if hasattr(exc, "message_dict"):
        errors = [
            {"field": field, "code": "invalid", "message": msg}
            for field, msgs in exc.message_dict.items()
            for msg in msgs
        ]
    else:
        errors = [{"field": "account", "code": "invalid", "message": m} for m in exc.messages]
    return InvalidAccountError("; ".join(e["message"] for e in errors), errors=errors)


def has_ledger_history(account: Account) -> bool:
    return account.ledger_entries.exists() or account.voucher_lines.exists()


def _code_taken(organization_id: str, code: str, *, exclude_pk=None) -> bool:
    qs = Account.objects.filter(organization_id=organization_id, code=(code or "").strip().upper())
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _resolve_parent(organization_id: str, parent, account_type: str, *, child_pk=None) -> Account | None:
    if parent in (None, ""):
        return None

    parent = find_account_by_id(organization_id, getattr(parent, "pk", parent))

    if child_pk is not None and parent.pk == child_pk:
        raise InvalidAccountError("An account cannot be its own parent")
    if parent.account_type != account_type:
        raise InvalidAccountError(
            f"Child accounts must share the parent's type ({parent.account_type})",
            errors=[{"field": "parent", "code": "type_mismatch", "message": "Parent type differs"}],
        )
    if not parent.is_group:
        if parent.ledger_entries.exists():
            raise AccountInUseError(f"Account {parent.code} has postings and cannot become a group account")
        parent.is_group = True
        parent.save(update_fields=["is_group", "updated_at"])

    return parent


# ============================================================
# COMMANDS
# ============================================================


@transaction.atomic
def create_account(organization_id: str, *, user=None, **data) -> Account:
    unknown = set(data) - CREATE_FIELDS
    if unknown:
        raise InvalidAccountError(f"Unknown account fields: {', '.join(sorted(unknown))}")

    code = (data.get("code") or "").strip().upper()
    if code and _code_taken(organization_id, code):
        raise DuplicateAccountCodeError(f"Account code {code} already exists")

    account_type = data.get("account_type")
    parent = _resolve_parent(organization_id, data.pop("parent", None), account_type)
    opening = money(data.pop("opening_balance", None))

    account = Account(
        organization_id=organization_id,
        parent=parent,
        opening_balance=opening,
        current_balance=opening,
        created_by=user,
        **data,
    )

    try:
        with transaction.atomic():
            account.save()
    except ValidationError as exc:
        raise _invalid(exc) from exc
    except IntegrityError as exc:
        raise DuplicateAccountCodeError(f"Account code {code} already exists") from exc

    logger.info(
        "Account created",
        extra={"organization_id": organization_id, "code": account.code, "user_id": getattr(user, "pk", None)},
    )
    return account


@transaction.atomic
def update_account(account: Account, *, user=None, **changes) -> Account:
    account = Account.active_objects.select_for_update().get(pk=account.pk)

    allowed = SYSTEM_EDITABLE_FIELDS if account.is_system_account else EDITABLE_FIELDS
    refused = set(changes) - allowed
    if refused:
        scope = "system account" if account.is_system_account else "account"
        raise AccountInUseError(f"Cannot change {', '.join(sorted(refused))} on a {scope}")

    if "code" in changes:
        changes["code"] = (changes["code"] or "").strip().upper()

    frozen = {f for f in HISTORY_LOCKED_FIELDS & set(changes) if _differs(account, f, changes[f])}
    if frozen and has_ledger_history(account):
        raise AccountInUseError(
            f"Cannot change {', '.join(sorted(frozen))} on account {account.code}: it has ledger history"
        )

    if "code" in changes and _code_taken(account.organization_id, changes["code"], exclude_pk=account.pk):
        raise DuplicateAccountCodeError(f"Account code {changes['code']} already exists")

    if "parent" in changes and _differs(account, "parent", changes["parent"]):
        if account.children.filter(is_deleted=False).exists():
            raise AccountInUseError("Accounts with children cannot be moved")
        account.parent = _resolve_parent(
            account.organization_id,
            changes.pop("parent"),
            changes.get("account_type", account.account_type),
            child_pk=account.pk,
        )
    changes.pop("parent", None)

    if "account_type" in changes and account.children.filter(is_deleted=False).exists():
        raise AccountInUseError("Group accounts with children cannot change type")

    for field, value in changes.items():
        setattr(account, field, value)

    try:
        account.save()
    except ValidationError as exc:
        raise _invalid(exc) from exc

    logger.info(
        "Account updated",
        extra={"account_id": account.pk, "code": account.code, "fields": sorted(changes), "user_id": getattr(user, "pk", None)},
    )
    return account


def _differs(account: Account, field: str, value) -> bool:
    if field == "parent":
        return getattr(value, "pk", value or None) != account.parent_id
    return getattr(account, field) != value


@transaction.atomic
def delete_account(account: Account, *, user=None) -> Account:
    account = Account.active_objects.select_for_update().get(pk=account.pk)

    if account.is_system_account:
        raise AccountInUseError(f"System account {account.code} cannot be deleted")
    if account.children.filter(is_deleted=False).exists():
        raise AccountInUseError(f"Account {account.code} has child accounts; delete or move them first")
    if account.current_balance != Decimal("0.00"):
        raise AccountInUseError(
            f"Account {account.code} has a balance of {account.current_balance} and cannot be deleted"
        )

    account.is_deleted = True
    account.is_active = False
    account.deleted_at = timezone.now()
    account.save(update_fields=["is_deleted", "is_active", "deleted_at", "updated_at"])

    logger.info(
        "Account deleted",
        extra={"account_id": account.pk, "code": account.code, "user_id": getattr(user, "pk", None)},
    )
    return account


# ============================================================
# QUERIES
# ============================================================


def get_account_tree(organization_id: str, *, account_type: str | None = None) -> list[dict]:
    """Nested dict tree of active (non-deleted) accounts, ordered by code."""
    qs = Account.active_objects.filter(organization_id=organization_id)
    if account_type:
        qs = qs.filter(account_type=account_type)

    nodes = {}
    for acc in qs.order_by("code"):
        nodes[acc.pk] = {
            "id": acc.pk,
            "code": acc.code,
            "name": acc.name,
            "account_type": acc.account_type,
            "category": acc.category,
            "normal_balance": acc.normal_balance,
            "level": acc.level,
            "is_group": acc.is_group,
            "is_active": acc.is_active,
            "current_balance": str(acc.current_balance),
            "parent_id": acc.parent_id,
            "children": [],
        }

    roots = []
    for node in nodes.values():
        parent = nodes.get(node["parent_id"])
        if parent is None:
            roots.append(node)
        else:
            parent["children"].append(node)
    return roots
