# accounting/models/document.py

"""
======================================================
PATH: accounting/models/document.py
======================================================
POSTABLE BUSINESS DOCUMENT (ABSTRACT)

Shared header for documents the posting orchestrator turns into vouchers
(sales invoices, walk-in sales, purchase invoices).

Totals:
    taxable_amount = subtotal - total_discount
    total_amount   = taxable_amount + total_tax + shipping_charges + other_charges

Lifecycle:
    draft --post--> posted
    draft --cancel--> cancelled
    posted --cancel--> cancelled (its voucher is voided)

Once posted, amounts are frozen; only posting/cancel metadata may change.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES)


class PostableDocument(models.Model):
    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    AMOUNT_FIELDS = (
        "subtotal",
        "total_discount",
        "taxable_amount",
        "total_tax",
        "shipping_charges",
        "other_charges",
        "total_amount",
    )

    # Fields the posting/cancel flows may still write on a posted document.
    LIFECYCLE_FIELDS = frozenset(
        {
            "status",
            "voucher",
            "is_posted",
            "posted_at",
            "posted_by",
            "cancelled_at",
            "cancelled_by",
            "cancel_reason",
            "updated_at",
        }
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.CharField(max_length=64, db_index=True)

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    total_discount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    taxable_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=ZERO, editable=False
    )
    total_tax = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    shipping_charges = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    other_charges = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=ZERO, editable=False
    )

    notes = models.TextField(blank=True, default="")

    voucher = models.ForeignKey(
        "accounting.Voucher",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    is_posted = models.BooleanField(default=False)
    posted_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancel_reason = models.CharField(max_length=500, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    # ------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------

    document_number_field = "invoice_number"
    document_date_field = "invoice_date"
    account_fields: tuple = ()

    def number_scope(self) -> dict:
        """Filter under which document_number must be unique."""
        return {"organization_id": self.organization_id}

    def balance_party(self):
        """Counterparty whose current_balance follows this document when posted."""
        return None

    @property
    def document_number(self) -> str:
        return getattr(self, self.document_number_field, "") or ""

    @property
    def document_date(self):
        return getattr(self, self.document_date_field, None) or timezone.localdate()

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.STATUS_CANCELLED

    @property
    def charges_amount(self) -> Decimal:
        return _money(self.shipping_charges) + _money(self.other_charges)

    def recalculate_totals(self) -> None:
        for name in ("subtotal", "total_discount", "total_tax", "shipping_charges", "other_charges"):
            setattr(self, name, _money(getattr(self, name)))

        self.taxable_amount = self.subtotal - self.total_discount
        self.total_amount = (
            self.taxable_amount + self.total_tax + self.shipping_charges + self.other_charges
        )

    def clean(self):
        self.organization_id = (self.organization_id or "").strip()
        if not self.organization_id:
            raise ValidationError({"organization_id": "organization_id is required"})

        number = (self.document_number or "").strip()
        if not number:
            raise ValidationError({self.document_number_field: f"{self.document_number_field} is required"})
        setattr(self, self.document_number_field, number)

        self.recalculate_totals()

        for name in ("subtotal", "total_discount", "total_tax", "shipping_charges", "other_charges"):
            if getattr(self, name) < ZERO:
                raise ValidationError({name: f"{name} cannot be negative"})

        if self.total_discount > self.subtotal:
            raise ValidationError({"total_discount": "total_discount cannot exceed subtotal"})

        if self.total_amount <= ZERO:
            raise ValidationError({"total_amount": "Document total must be greater than zero"})

        if self.status == self.STATUS_POSTED and not (self.posted_at and self.voucher_id):
            raise ValidationError({"status": "Posted documents require posted_at and a voucher"})

    def _stored_status(self) -> str | None:
        if not self.pk or self._state.adding:
            return None
        return type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()

    def save(self, *args, **kwargs):
        stored = self._stored_status()
        update_fields = kwargs.get("update_fields")

        if stored is not None and stored != self.STATUS_DRAFT:
            if update_fields is None or not set(update_fields) <= self.LIFECYCLE_FIELDS:
                raise ValidationError(f"{self.document_number} is {stored}; amounts are frozen")
            if stored == self.STATUS_CANCELLED:
                raise ValidationError(f"{self.document_number} is cancelled and cannot change")

        if update_fields is not None:
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self._stored_status() not in (None, self.STATUS_DRAFT):
            raise ValidationError(f"{self.document_number} is {self.status} and cannot be deleted")
        return super().delete(*args, **kwargs)
