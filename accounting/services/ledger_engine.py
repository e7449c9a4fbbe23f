# accounting/services/ledger_engine.py

"""
======================================================
PATH: accounting/services/ledger_engine.py
======================================================
LEDGER ENGINE (POST / VOID)

This module is the ONLY place allowed to:
- Create LedgerEntry rows
- Move Account.current_balance
- Move a voucher out of draft

State machine:
    draft --post_voucher()--> posted --void_voucher()--> void

Guarantees:
- post and void each run as ONE transaction; any failure leaves the
  voucher in its prior status with no entries and no balance movement
- Voucher row is locked first, then touched accounts in pk order
- Balances move through F() increments (no lost update between requests)
- Void never deletes: originals are marked void and offset by reversal
  entries carrying the flipped entry type
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from django.apps import apps
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounting.models.document import PostableDocument
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import EntryType, Voucher
from accounting.services.account_registry import adjust_balance, balance_delta, lock_accounts
from accounting.services.exceptions import (
    AlreadyPostedError,
    AlreadyVoidError,
    DocumentVoucherError,
    NotPostedError,
    VoidedVoucherError,
    VoidReasonTooLongError,
    VoidReasonTooShortError,
    VoucherNotFoundError,
)
from accounting.services.voucher_validation import LineDraft, assert_double_entry

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _flip(entry_type: str) -> str:
    return EntryType.CREDIT if entry_type == EntryType.DEBIT else EntryType.DEBIT


def _lock_voucher(voucher: Voucher) -> Voucher:
    try:
        return Voucher.active_objects.select_for_update().get(
            pk=voucher.pk, organization_id=voucher.organization_id
        )
    except Voucher.DoesNotExist as exc:
        raise VoucherNotFoundError(f"Voucher {voucher.pk} not found") from exc


def _apply_net_deltas(net: dict) -> None:
    for account_id, delta in sorted(net.items()):
        if delta != ZERO:
            adjust_balance(account_id, delta)


# ============================================================
# POST
# ============================================================


@transaction.atomic
def post_voucher(voucher: Voucher, actor=None) -> Voucher:
    """
    Turn a draft voucher into ledger fact.

    Returns the locked, updated voucher instance.
    """
    voucher = _lock_voucher(voucher)

    if voucher.status == Voucher.STATUS_POSTED:
        logger.warning("Refused to post an already posted voucher", extra={"voucher_number": voucher.voucher_number})
        raise AlreadyPostedError(f"Voucher {voucher.voucher_number} is already posted")
    if voucher.status == Voucher.STATUS_VOID:
        logger.warning("Refused to post a void voucher", extra={"voucher_number": voucher.voucher_number})
        raise VoidedVoucherError(f"Voucher {voucher.voucher_number} is void and cannot be posted")

    lines = list(voucher.lines.order_by("line_number"))
    accounts = lock_accounts(line.account_id for line in lines)

    # Re-validate against the locked account state.
    totals = assert_double_entry(
        [
            LineDraft(
                account=accounts.get(line.account_id),
                debit=line.debit,
                credit=line.credit,
                description=line.description,
                account_ref=line.account_id,
            )
            for line in lines
        ],
        organization_id=voucher.organization_id,
    )

    running = {pk: acc.current_balance for pk, acc in accounts.items()}
    net = defaultdict(lambda: ZERO)
    entries = []

    for line in lines:
        account = accounts[line.account_id]
        delta = balance_delta(account, line.entry_type, line.amount)
        running[account.pk] += delta
        net[account.pk] += delta

        entries.append(
            LedgerEntry(
                organization_id=voucher.organization_id,
                voucher=voucher,
                account=account,
                line_number=line.line_number,
                entry_type=line.entry_type,
                amount=line.amount,
                running_balance=running[account.pk],
                voucher_number=voucher.voucher_number,
                voucher_type=voucher.voucher_type,
                entry_date=voucher.voucher_date,
                fiscal_year=voucher.fiscal_year,
                fiscal_period=voucher.fiscal_period,
                description=line.description or voucher.narration[:255],
                narration=voucher.narration,
                reference_type=voucher.reference_type,
                reference_id=voucher.reference_id,
                status=LedgerEntry.STATUS_ACTIVE,
                created_by=actor,
            )
        )

    LedgerEntry.objects.bulk_create(entries)
    _apply_net_deltas(net)

    voucher.status = Voucher.STATUS_POSTED
    voucher.posted_by = actor
    voucher.posted_at = timezone.now()
    voucher.total_debit = totals.total_debit
    voucher.total_credit = totals.total_credit
    voucher.save(
        update_fields=["status", "posted_by", "posted_at", "total_debit", "total_credit", "updated_at"]
    )

    logger.info(
        "Voucher posted",
        extra={
            "organization_id": voucher.organization_id,
            "voucher_id": str(voucher.pk),
            "voucher_number": voucher.voucher_number,
            "entries": len(entries),
            "amount": str(totals.total_debit),
            "user_id": getattr(actor, "pk", None),
        },
    )
    return voucher


# ============================================================
# VOID
# ============================================================


def clean_void_reason(reason: str, *, required: bool = True) -> str:
    """Strip and length-check a void/cancel reason (it lands in 500-char columns)."""
    reason = (reason or "").strip()

    max_len = Voucher._meta.get_field("void_reason").max_length
    if len(reason) > max_len:
        raise VoidReasonTooLongError(
            f"Void reason must be at most {max_len} characters",
            errors=[{"field": "reason", "code": "too_long", "message": f"Maximum {max_len} characters"}],
        )

    min_len = int(getattr(settings, "VOID_REASON_MIN_LENGTH", 5))
    if required and len(reason) < min_len:
        raise VoidReasonTooShortError(
            f"Void reason must be at least {min_len} characters",
            errors=[{"field": "reason", "code": "too_short", "message": f"Minimum {min_len} characters"}],
        )
    return reason


def find_owning_document(voucher: Voucher):
    """The business document whose posting created this voucher, if any."""
    for model in apps.get_models():
        if issubclass(model, PostableDocument):
            document = model.objects.filter(voucher_id=voucher.pk).first()
            if document is not None:
                return document
    return None


@transaction.atomic
def void_voucher(voucher: Voucher, actor=None, reason: str = "", *, source_document=None) -> Voucher:
    """
    Reverse a posted voucher without deleting history.

    Every active entry is marked void and offset by one reversal entry;
    balances get the inverse of the posting delta.

    A voucher created by a business document is only voided through that
    document's cancellation (posting.cancel_document passes source_document).
    """
    voucher = _lock_voucher(voucher)

    if voucher.status == Voucher.STATUS_DRAFT:
        raise NotPostedError()
    if voucher.status == Voucher.STATUS_VOID:
        raise AlreadyVoidError()

    owner = find_owning_document(voucher)
    if owner is not None and (source_document is None or owner.pk != source_document.pk):
        logger.warning(
            "Refused to void a document voucher directly",
            extra={"voucher_number": voucher.voucher_number, "document": owner.document_number},
        )
        raise DocumentVoucherError(
            f"Voucher {voucher.voucher_number} belongs to {owner.document_number}; cancel the document instead"
        )

    reason = clean_void_reason(reason)

    originals = list(
        voucher.ledger_entries.filter(status=LedgerEntry.STATUS_ACTIVE).order_by("line_number", "id")
    )
    accounts = lock_accounts(e.account_id for e in originals)

    now = timezone.now()
    void_date = timezone.localdate()
    running = {pk: acc.current_balance for pk, acc in accounts.items()}
    net = defaultdict(lambda: ZERO)
    reversals = []

    for original in originals:
        account = accounts[original.account_id]
        flipped = _flip(original.entry_type)
        delta = balance_delta(account, flipped, original.amount)
        running[account.pk] += delta
        net[account.pk] += delta

        original.mark_voided(user=actor, reason=reason, at=now)

        reversals.append(
            LedgerEntry(
                organization_id=voucher.organization_id,
                voucher=voucher,
                account=account,
                line_number=original.line_number,
                entry_type=flipped,
                amount=original.amount,
                running_balance=running[account.pk],
                voucher_number=voucher.voucher_number,
                voucher_type=voucher.voucher_type,
                entry_date=void_date,
                fiscal_year=Voucher.fiscal_year_for(void_date),
                fiscal_period=Voucher.fiscal_period_for(void_date),
                description=f"Reversal: {original.description}"[:255],
                narration=f"VOID: {reason}",
                reference_type=voucher.reference_type,
                reference_id=voucher.reference_id,
                status=LedgerEntry.STATUS_REVERSAL,
                reversal_of=original,
                created_by=actor,
            )
        )

    LedgerEntry.objects.bulk_create(reversals)
    _apply_net_deltas(net)

    voucher.status = Voucher.STATUS_VOID
    voucher.voided_by = actor
    voucher.voided_at = now
    voucher.void_reason = reason
    voucher.save(update_fields=["status", "voided_by", "voided_at", "void_reason", "updated_at"])

    logger.info(
        "Voucher voided",
        extra={
            "organization_id": voucher.organization_id,
            "voucher_id": str(voucher.pk),
            "voucher_number": voucher.voucher_number,
            "reversed_entries": len(reversals),
            "user_id": getattr(actor, "pk", None),
        },
    )
    return voucher


# ============================================================
# READ QUERIES
# ============================================================


def find_ledger_entries_by_voucher(voucher: Voucher):
    return (
        LedgerEntry.objects.filter(voucher_id=voucher.pk, organization_id=voucher.organization_id)
        .select_related("account")
        .order_by("id")
    )


def find_ledger_entries_by_account(
    organization_id: str,
    account,
    *,
    start_date=None,
    end_date=None,
    include_void: bool = False,
):
    account_id = getattr(account, "pk", account)
    qs = LedgerEntry.objects.filter(organization_id=organization_id, account_id=account_id)

    if not include_void:
        qs = qs.filter(status=LedgerEntry.STATUS_ACTIVE)
    if start_date:
        qs = qs.filter(entry_date__gte=start_date)
    if end_date:
        qs = qs.filter(entry_date__lte=end_date)

    return qs.select_related("voucher").order_by("entry_date", "created_at", "id")
