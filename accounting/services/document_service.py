# accounting/services/document_service.py

"""
======================================================
PATH: accounting/services/document_service.py
======================================================
DRAFT DOCUMENT COMMANDS

Create / update / delete for postable business documents
(sales invoices, walk-in sales, purchase invoices) while they are drafts.

Posting and cancelling live in accounting.services.posting.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounting.models.document import PostableDocument
from accounting.services.exceptions import (
    DocumentCancelledError,
    DuplicateDocumentNumberError,
    InvalidDocumentError,
    VoucherNotEditableError,
)
from accounting.services.posting import get_document

logger = logging.getLogger(__name__)

# Set by the posting / cancel flows only.
PROTECTED_FIELDS = PostableDocument.LIFECYCLE_FIELDS | {
    "id",
    "organization_id",
    "taxable_amount",
    "total_amount",
    "created_by",
    "created_at",
}


def _invalid(exc: ValidationError) -> InvalidDocumentError:
    if hasattr(exc, "message_dict"):
        errors = [
            {"field": field, "code": "invalid", "message": msg}
            for field, msgs in exc.message_dict.items()
            for msg in msgs
        ]
    else:
        errors = [{"field": "non_field_errors", "code": "invalid", "message": msg} for msg in exc.messages]
    return InvalidDocumentError("; ".join(e["message"] for e in errors), errors=errors)


def _check_fields(model, organization_id: str, data: dict) -> None:
    blocked = sorted(set(data) & PROTECTED_FIELDS)
    if blocked:
        raise InvalidDocumentError(f"Fields cannot be set directly: {', '.join(blocked)}")

    for field in model.account_fields:
        account = data.get(field)
        if account is not None and account.organization_id != organization_id:
            raise InvalidDocumentError(
                f"{field} belongs to another organization",
                errors=[{"field": field, "code": "organization", "message": "Account belongs to another organization"}],
            )


def _check_number_free(document: PostableDocument) -> None:
    taken = (
        type(document)
        .objects.filter(**document.number_scope(), **{document.document_number_field: document.document_number.strip()})
        .exclude(pk=document.pk)
        .exists()
    )
    if taken:
        raise DuplicateDocumentNumberError(f"{document.document_number} already exists")


def _save(document: PostableDocument) -> None:
    try:
        _check_number_free(document)
        with transaction.atomic():
            document.save()
    except ValidationError as exc:
        raise _invalid(exc) from exc
    except IntegrityError as exc:
        raise DuplicateDocumentNumberError(f"{document.document_number} already exists") from exc


@transaction.atomic
def create_document(model, organization_id: str, *, user=None, **data) -> PostableDocument:
    _check_fields(model, organization_id, data)

    document = model(organization_id=organization_id, created_by=user, **data)
    _save(document)

    logger.info(
        "Document draft created",
        extra={
            "organization_id": organization_id,
            "document": document.document_number,
            "document_type": model._meta.model_name,
            "user_id": getattr(user, "pk", None),
        },
    )
    return document


def _require_draft(document: PostableDocument, action: str) -> None:
    if document.is_cancelled:
        raise DocumentCancelledError(f"{document.document_number} is cancelled")
    if document.status != PostableDocument.STATUS_DRAFT:
        raise VoucherNotEditableError(f"Cannot {action} a {document.status} document")


@transaction.atomic
def update_document(document: PostableDocument, *, user=None, **changes) -> PostableDocument:
    document = get_document(type(document), document.organization_id, document.pk, for_update=True)
    _require_draft(document, "update")

    _check_fields(type(document), document.organization_id, changes)

    for field, value in changes.items():
        setattr(document, field, value)
    _save(document)

    logger.info(
        "Document draft updated",
        extra={
            "organization_id": document.organization_id,
            "document": document.document_number,
            "user_id": getattr(user, "pk", None),
        },
    )
    return document


@transaction.atomic
def delete_document(document: PostableDocument, *, user=None) -> None:
    document = get_document(type(document), document.organization_id, document.pk, for_update=True)
    _require_draft(document, "delete")

    number = document.document_number
    document.delete()

    logger.info(
        "Document draft deleted",
        extra={
            "organization_id": document.organization_id,
            "document": number,
            "user_id": getattr(user, "pk", None),
        },
    )
