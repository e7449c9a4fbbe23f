# accounting/services/voucher_service.py

"""
======================================================
PATH: accounting/services/voucher_service.py
======================================================
VOUCHER STORE (DRAFT LIFECYCLE)

- create_draft()          -> numbered, validated draft voucher
- find_voucher_by_id()    -> org-scoped lookup (ActiveVouchers)
- update_draft()          -> header + lines of a draft only
- delete_draft()          -> soft delete of a draft only
- list_vouchers()         -> filtered queryset
- get_voucher_statistics() -> counts/amounts per type and status

Posting and voiding live in ledger_engine; this module never touches
ledger entries or balances.

Line input shape (either form per line):
    {"account": <id>, "debit": "100.00", "credit": "0"}
    {"account_id": <id>, "entry_type": "CREDIT", "amount": "100.00"}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.voucher import EntryType, Voucher, VoucherLine
from accounting.services.exceptions import (
    InvalidEntryError,
    LedgerValidationError,
    VoucherNotEditableError,
    VoucherNotFoundError,
    VoidedVoucherError,
)
from accounting.services.numbering import allocate_voucher_number
from accounting.services.voucher_validation import (
    ZERO,
    LineDraft,
    assert_double_entry,
    money,
)

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "voucher_date",
    "narration",
    "reference_type",
    "reference_id",
    "reference_number",
)


# ============================================================
# INPUT NORMALIZATION
# ============================================================


def _account_ref(raw: dict):
    ref = raw.get("account", raw.get("account_id"))
    if isinstance(ref, Account):
        return ref.pk
    return ref


def normalize_lines(organization_id: str, raw_lines: Iterable[dict]) -> list[LineDraft]:
    """Resolve account references (org-scoped) and coerce amounts to money."""
    raw_lines = list(raw_lines or [])
    refs = {_account_ref(r) for r in raw_lines if _account_ref(r) is not None}

    accounts = {}
    if refs:
        try:
            found = Account.objects.filter(organization_id=organization_id, pk__in=refs)
            accounts = {str(a.pk): a for a in found}
        except (ValueError, TypeError, ValidationError) as exc:
            raise InvalidEntryError("Entries reference an invalid account id") from exc

    drafts: list[LineDraft] = []
    for raw in raw_lines:
        ref = _account_ref(raw)

        entry_type = (raw.get("entry_type") or "").upper()
        if entry_type:
            if entry_type not in EntryType.values:
                raise InvalidEntryError(f"Invalid entry_type: {raw.get('entry_type')}")
            amount = money(raw.get("amount"))
            debit = amount if entry_type == EntryType.DEBIT else ZERO
            credit = amount if entry_type == EntryType.CREDIT else ZERO
        else:
            debit = money(raw.get("debit"))
            credit = money(raw.get("credit"))

        drafts.append(
            LineDraft(
                account=accounts.get(str(ref)) if ref is not None else None,
                debit=debit,
                credit=credit,
                description=(raw.get("description") or "").strip(),
                account_ref=ref,
            )
        )
    return drafts


def _write_lines(voucher: Voucher, lines: list[LineDraft]) -> None:
    VoucherLine.objects.bulk_create(
        [
            VoucherLine(
                voucher=voucher,
                line_number=idx,
                account=line.account,
                entry_type=line.entry_type,
                amount=line.amount,
                description=line.description[:255],
            )
            for idx, line in enumerate(lines, start=1)
        ]
    )


def _as_validation_error(exc: ValidationError) -> LedgerValidationError:
    if hasattr(exc, "message_dict"):
        errors = [
            {"field": field, "code": "invalid", "message": msg}
            for field, msgs in exc.message_dict.items()
            for msg in msgs
        ]
    else:
        errors = [{"field": "voucher", "code": "invalid", "message": m} for m in exc.messages]
    return LedgerValidationError("; ".join(e["message"] for e in errors), errors=errors)


# ============================================================
# COMMANDS
# ============================================================


@transaction.atomic
def create_draft(
    *,
    organization_id: str,
    voucher_type: str,
    narration: str,
    lines: Iterable[dict],
    voucher_date=None,
    reference_type: str = Voucher.REF_MANUAL,
    reference_id: str = "",
    reference_number: str = "",
    user=None,
) -> Voucher:
    """
    Create a numbered draft voucher.

    The double-entry rules are enforced up front, so a draft is always
    postable unless an account changes state before posting.
    """
    if voucher_type not in {code for code, _ in Voucher.VOUCHER_TYPES}:
        raise InvalidEntryError(
            f"Invalid voucher type: {voucher_type}",
            errors=[{"field": "voucher_type", "code": "invalid", "message": "Invalid voucher type"}],
        )

    drafts = normalize_lines(organization_id, lines)
    totals = assert_double_entry(drafts, organization_id=organization_id)

    voucher = Voucher(
        organization_id=organization_id,
        voucher_type=voucher_type,
        voucher_date=voucher_date or timezone.localdate(),
        narration=narration,
        reference_type=reference_type or Voucher.REF_MANUAL,
        reference_id=str(reference_id or ""),
        reference_number=reference_number or "",
        total_debit=totals.total_debit,
        total_credit=totals.total_credit,
        status=Voucher.STATUS_DRAFT,
        created_by=user,
    )

    try:
        voucher.full_clean(exclude=["voucher_number"], validate_constraints=False)
        allocate_voucher_number(voucher)
    except ValidationError as exc:
        raise _as_validation_error(exc) from exc

    _write_lines(voucher, drafts)

    logger.info(
        "Voucher draft created",
        extra={
            "organization_id": organization_id,
            "voucher_id": str(voucher.pk),
            "voucher_number": voucher.voucher_number,
            "user_id": getattr(user, "pk", None),
        },
    )
    return voucher


def find_voucher_by_id(organization_id: str, voucher_id, *, for_update: bool = False) -> Voucher:
    qs = Voucher.active_objects.filter(organization_id=organization_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=voucher_id)
    except (Voucher.DoesNotExist, ValueError, ValidationError) as exc:
        raise VoucherNotFoundError(f"Voucher {voucher_id} not found") from exc


def _require_draft(voucher: Voucher, action: str) -> None:
    if voucher.status == Voucher.STATUS_VOID:
        raise VoidedVoucherError(f"Cannot {action} a void voucher")
    if voucher.status != Voucher.STATUS_DRAFT:
        raise VoucherNotEditableError(f"Cannot {action} a {voucher.status} voucher")


@transaction.atomic
def update_draft(voucher: Voucher, *, lines: Iterable[dict] | None = None, user=None, **changes) -> Voucher:
    voucher = find_voucher_by_id(voucher.organization_id, voucher.pk, for_update=True)
    _require_draft(voucher, "update")

    unknown = set(changes) - set(HEADER_FIELDS)
    if unknown:
        raise InvalidEntryError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    for field, value in changes.items():
        setattr(voucher, field, value)

    if voucher.voucher_date and Voucher.fiscal_year_for(voucher.voucher_date) != voucher.voucher_number.split("-")[1]:
        # The number encodes the fiscal year it was drawn for.
        raise InvalidEntryError(
            "voucher_date cannot move a draft into another fiscal year",
            errors=[{"field": "voucher_date", "code": "fiscal_year_change", "message": "Fiscal year is fixed by the voucher number"}],
        )

    if lines is not None:
        drafts = normalize_lines(voucher.organization_id, lines)
        totals = assert_double_entry(drafts, organization_id=voucher.organization_id)
        voucher.lines.all().delete()
        _write_lines(voucher, drafts)
        voucher.total_debit = totals.total_debit
        voucher.total_credit = totals.total_credit

    try:
        voucher.save()
    except ValidationError as exc:
        raise _as_validation_error(exc) from exc

    logger.info(
        "Voucher draft updated",
        extra={
            "voucher_id": str(voucher.pk),
            "voucher_number": voucher.voucher_number,
            "user_id": getattr(user, "pk", None),
        },
    )
    return voucher


@transaction.atomic
def delete_draft(voucher: Voucher, *, user=None) -> None:
    """Soft delete. The number stays consumed."""
    voucher = find_voucher_by_id(voucher.organization_id, voucher.pk, for_update=True)
    _require_draft(voucher, "delete")

    voucher.is_deleted = True
    voucher.deleted_at = timezone.now()
    voucher.save(update_fields=["is_deleted", "deleted_at", "updated_at"])

    logger.info(
        "Voucher draft deleted",
        extra={
            "voucher_id": str(voucher.pk),
            "voucher_number": voucher.voucher_number,
            "user_id": getattr(user, "pk", None),
        },
    )


# ============================================================
# QUERIES
# ============================================================


def list_vouchers(
    organization_id: str,
    *,
    voucher_type: str | None = None,
    status: str | None = None,
    fiscal_year: str | None = None,
    fiscal_period: str | None = None,
    reference_type: str | None = None,
    start_date=None,
    end_date=None,
    search: str | None = None,
):
    qs = Voucher.active_objects.filter(organization_id=organization_id)

    if voucher_type:
        qs = qs.filter(voucher_type=voucher_type)
    if status:
        qs = qs.filter(status=status)
    if fiscal_year:
        qs = qs.filter(fiscal_year=str(fiscal_year))
    if fiscal_period:
        qs = qs.filter(fiscal_period=fiscal_period)
    if reference_type:
        qs = qs.filter(reference_type=reference_type)
    if start_date:
        qs = qs.filter(voucher_date__gte=start_date)
    if end_date:
        qs = qs.filter(voucher_date__lte=end_date)
    if search:
        qs = qs.filter(
            Q(voucher_number__icontains=search)
            | Q(narration__icontains=search)
            | Q(reference_number__icontains=search)
        )

    return qs.order_by("-voucher_date", "-voucher_number")


def get_voucher_statistics(organization_id: str, fiscal_year: str | None = None) -> dict:
    fiscal_year = str(fiscal_year or timezone.localdate().year)

    rows = (
        Voucher.active_objects.filter(organization_id=organization_id, fiscal_year=fiscal_year)
        .values("voucher_type")
        .annotate(
            count=Count("id"),
            total_amount=Sum("total_debit"),
            posted=Count("id", filter=Q(status=Voucher.STATUS_POSTED)),
            draft=Count("id", filter=Q(status=Voucher.STATUS_DRAFT)),
            void=Count("id", filter=Q(status=Voucher.STATUS_VOID)),
        )
        .order_by("voucher_type")
    )

    by_type = {}
    totals = {"count": 0, "total_amount": Decimal("0.00"), "posted": 0, "draft": 0, "void": 0}
    for row in rows:
        amount = row["total_amount"] or Decimal("0.00")
        by_type[row["voucher_type"]] = {
            "count": row["count"],
            "total_amount": str(amount),
            "posted": row["posted"],
            "draft": row["draft"],
            "void": row["void"],
        }
        totals["count"] += row["count"]
        totals["total_amount"] += amount
        for key in ("posted", "draft", "void"):
            totals[key] += row[key]

    totals["total_amount"] = str(totals["total_amount"])
    return {"fiscal_year": fiscal_year, "by_type": by_type, "totals": totals}
