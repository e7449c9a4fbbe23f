# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ORCHESTRATOR

Turns a business document into ONE balanced voucher and posts it.

This module should remain a thin adapter:
- It DOES map business documents -> voucher lines
- It DOES resolve default accounts (created on first use)
- It ALWAYS goes through voucher_service.create_draft + ledger_engine.post_voucher
- It NEVER writes ledger entries or account balances itself

Entries:
    Purchase invoice (JV)
        Dr Purchases          taxable + shipping + other charges
        Dr Input Tax          total_tax        (when > 0)
        Cr Accounts Payable   total_amount

    Sales invoice (JV)
        Dr Accounts Receivable  total_amount
        Cr Sales Revenue        taxable + shipping + other charges
        Cr Sales Tax Payable    total_tax      (when > 0)

    Walk-in sale (RV)
        Dr Cash in Hand         total_amount
        Cr Sales Revenue        taxable + other charges
        Cr Sales Tax Payable    total_tax      (when > 0)

Documents with a counterparty (purchase invoice -> supplier) also move the
party's current_balance by total_amount; cancel moves it back.

All-or-nothing: document lock, voucher creation, posting, the party balance
and the document update share one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models.document import PostableDocument
from accounting.models.voucher import EntryType, Voucher
from accounting.services import account_registry as registry
from accounting.services.exceptions import (
    AlreadyPostedError,
    BalanceUpdateError,
    DocumentCancelledError,
    DocumentNotFoundError,
    InvalidEntryError,
)
from accounting.services.ledger_engine import clean_void_reason, post_voucher, void_voucher
from accounting.services.voucher_service import create_draft

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PostingLeg:
    """One voucher line sourced from a document amount."""

    account_field: str
    default_key: str
    entry_type: str
    amount: Decimal
    description: str


# ============================================================
# SHARED FLOW
# ============================================================


def get_document(model, organization_id: str, document_id, *, for_update: bool = False):
    qs = model.objects.filter(organization_id=organization_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=document_id)
    except (model.DoesNotExist, ValueError, ValidationError) as exc:
        raise DocumentNotFoundError(f"{model._meta.verbose_name} {document_id} not found") from exc


def _lock(document: PostableDocument) -> PostableDocument:
    return get_document(type(document), document.organization_id, document.pk, for_update=True)


def _guard_postable(document: PostableDocument) -> None:
    if document.is_cancelled:
        logger.warning(
            "Refused to post a cancelled document",
            extra={"document": document.document_number, "organization_id": document.organization_id},
        )
        raise DocumentCancelledError(f"{document.document_number} is cancelled and cannot be posted")

    if document.is_posted or document.status == PostableDocument.STATUS_POSTED:
        logger.warning(
            "Refused to post an already posted document",
            extra={"document": document.document_number, "organization_id": document.organization_id},
        )
        raise AlreadyPostedError(f"{document.document_number} is already posted")


def _resolve_account(document: PostableDocument, leg: PostingLeg, *, actor, fallback=None):
    override = getattr(document, leg.account_field, None) or fallback
    if override is not None:
        if override.organization_id != document.organization_id:
            raise InvalidEntryError(f"{leg.account_field} belongs to another organization")
        return override
    return registry.find_or_create_default_account(document.organization_id, leg.default_key, user=actor)


def _move_party_balance(document: PostableDocument, delta: Decimal) -> None:
    party = document.balance_party()
    if party is None or delta == ZERO:
        return

    updated = type(party).objects.filter(pk=party.pk).update(current_balance=F("current_balance") + delta)
    if updated != 1:
        raise BalanceUpdateError(f"Balance update for {party} affected {updated} rows")


def _post_document(
    document: PostableDocument,  # locked by the caller
    *,
    actor,
    voucher_type: str,
    reference_type: str,
    narration: str,
    legs: list[PostingLeg],
    fallbacks: dict | None = None,
) -> PostableDocument:
    _guard_postable(document)

    fallbacks = fallbacks or {}
    lines = []
    used_accounts = {}

    for leg in legs:
        if leg.amount <= ZERO:
            continue
        account = _resolve_account(document, leg, actor=actor, fallback=fallbacks.get(leg.account_field))
        used_accounts[leg.account_field] = account
        lines.append(
            {
                "account": account.pk,
                "entry_type": leg.entry_type,
                "amount": leg.amount,
                "description": leg.description,
            }
        )

    voucher = create_draft(
        organization_id=document.organization_id,
        voucher_type=voucher_type,
        voucher_date=document.document_date,
        narration=narration,
        lines=lines,
        reference_type=reference_type,
        reference_id=str(document.pk),
        reference_number=document.document_number,
        user=actor,
    )
    voucher = post_voucher(voucher, actor)
    _move_party_balance(document, document.total_amount)

    for field, account in used_accounts.items():
        setattr(document, field, account)

    document.voucher = voucher
    document.is_posted = True
    document.posted_at = voucher.posted_at
    document.posted_by = actor
    document.status = PostableDocument.STATUS_POSTED
    document.save(
        update_fields=[
            *used_accounts.keys(),
            "voucher",
            "is_posted",
            "posted_at",
            "posted_by",
            "status",
            "updated_at",
        ]
    )

    logger.info(
        "Document posted",
        extra={
            "organization_id": document.organization_id,
            "document": document.document_number,
            "document_type": reference_type,
            "voucher_number": voucher.voucher_number,
            "amount": str(document.total_amount),
            "user_id": getattr(actor, "pk", None),
        },
    )
    return document


# ============================================================
# PER-DOCUMENT ENTRY POINTS
# ============================================================


@transaction.atomic
def post_purchase_invoice(invoice, actor=None):
    invoice = _lock(invoice)
    supplier = invoice.supplier
    legs = [
        PostingLeg(
            account_field="purchase_account",
            default_key=registry.PURCHASES,
            entry_type=EntryType.DEBIT,
            amount=invoice.taxable_amount + invoice.charges_amount,
            description=f"Purchases - {invoice.invoice_number}",
        ),
        PostingLeg(
            account_field="tax_account",
            default_key=registry.INPUT_TAX,
            entry_type=EntryType.DEBIT,
            amount=invoice.total_tax,
            description=f"Input tax - {invoice.invoice_number}",
        ),
        PostingLeg(
            account_field="payable_account",
            default_key=registry.ACCOUNTS_PAYABLE,
            entry_type=EntryType.CREDIT,
            amount=invoice.total_amount,
            description=f"Payable to {supplier.name}",
        ),
    ]
    return _post_document(
        invoice,
        actor=actor,
        voucher_type=Voucher.TYPE_JOURNAL,
        reference_type=Voucher.REF_PURCHASE,
        narration=f"Purchase Invoice {invoice.invoice_number} - {supplier.name}",
        legs=legs,
        fallbacks={"payable_account": supplier.payable_account},
    )


@transaction.atomic
def post_sales_invoice(invoice, actor=None):
    invoice = _lock(invoice)
    legs = [
        PostingLeg(
            account_field="receivable_account",
            default_key=registry.ACCOUNTS_RECEIVABLE,
            entry_type=EntryType.DEBIT,
            amount=invoice.total_amount,
            description=f"Receivable from {invoice.customer_name}",
        ),
        PostingLeg(
            account_field="revenue_account",
            default_key=registry.SALES_REVENUE,
            entry_type=EntryType.CREDIT,
            amount=invoice.taxable_amount + invoice.charges_amount,
            description=f"Sales - {invoice.invoice_number}",
        ),
        PostingLeg(
            account_field="tax_account",
            default_key=registry.SALES_TAX_PAYABLE,
            entry_type=EntryType.CREDIT,
            amount=invoice.total_tax,
            description=f"Sales tax - {invoice.invoice_number}",
        ),
    ]
    return _post_document(
        invoice,
        actor=actor,
        voucher_type=Voucher.TYPE_JOURNAL,
        reference_type=Voucher.REF_INVOICE,
        narration=f"Sales Invoice {invoice.invoice_number} - {invoice.customer_name}",
        legs=legs,
    )


@transaction.atomic
def post_walk_in_sale(sale, actor=None):
    sale = _lock(sale)
    legs = [
        PostingLeg(
            account_field="cash_account",
            default_key=registry.CASH_IN_HAND,
            entry_type=EntryType.DEBIT,
            amount=sale.total_amount,
            description=f"Cash received - {sale.sale_number}",
        ),
        PostingLeg(
            account_field="revenue_account",
            default_key=registry.SALES_REVENUE,
            entry_type=EntryType.CREDIT,
            amount=sale.taxable_amount + sale.other_charges,
            description=f"Sales - {sale.sale_number}",
        ),
        PostingLeg(
            account_field="tax_account",
            default_key=registry.SALES_TAX_PAYABLE,
            entry_type=EntryType.CREDIT,
            amount=sale.total_tax,
            description=f"Sales tax - {sale.sale_number}",
        ),
    ]
    return _post_document(
        sale,
        actor=actor,
        voucher_type=Voucher.TYPE_RECEIPT,
        reference_type=Voucher.REF_WALK_IN_SALE,
        narration=f"Walk-in Sale {sale.sale_number} - {sale.customer_name or 'Walk-in Customer'}",
        legs=legs,
    )


# ============================================================
# CANCEL
# ============================================================


@transaction.atomic
def cancel_document(document: PostableDocument, actor=None, reason: str = "") -> PostableDocument:
    """
    Cancel a document. A posted document has its voucher voided first,
    so reason must satisfy the void-reason rule in that case.
    """
    document = _lock(document)

    if document.is_cancelled:
        raise DocumentCancelledError(f"{document.document_number} is already cancelled")

    was_posted = document.status == PostableDocument.STATUS_POSTED
    reason = clean_void_reason(reason, required=was_posted)

    if was_posted and document.voucher_id:
        # A voucher voided before its document was cancelled only needs the
        # document side finished.
        if document.voucher.status != Voucher.STATUS_VOID:
            document.voucher = void_voucher(document.voucher, actor, reason, source_document=document)
        _move_party_balance(document, -document.total_amount)

    document.status = PostableDocument.STATUS_CANCELLED
    document.cancelled_at = timezone.now()
    document.cancelled_by = actor
    document.cancel_reason = reason
    document.save(update_fields=["status", "cancelled_at", "cancelled_by", "cancel_reason", "updated_at"])

    logger.info(
        "Document cancelled",
        extra={
            "organization_id": document.organization_id,
            "document": document.document_number,
            "voucher_id": str(document.voucher_id) if document.voucher_id else None,
            "user_id": getattr(actor, "pk", None),
        },
    )
    return document
