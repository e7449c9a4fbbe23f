# accounting/models/voucher.py

"""
======================================================
PATH: accounting/models/voucher.py
======================================================
VOUCHER MODELS

Voucher       -> header of a proposed/recorded balanced transaction
VoucherLine   -> ordered debit/credit line against one account

Lifecycle:
    draft --post--> posted --void--> void
    draft --delete--> (soft-deleted)

Guarantees:
- voucher_number unique per organization
- fiscal_year / fiscal_period are derived from voucher_date
- Posted and void vouchers are immutable; only status metadata may change
- Lines of a non-draft voucher cannot be added, changed or removed
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import Account


class EntryType(models.TextChoices):
    DEBIT = "DEBIT", "Debit"
    CREDIT = "CREDIT", "Credit"


class ActiveVoucherManager(models.Manager):
    """Repository-level soft-delete filter (the ActiveVouchers view)."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class Voucher(models.Model):
    TYPE_JOURNAL = "JV"
    TYPE_PAYMENT = "PV"
    TYPE_RECEIPT = "RV"
    TYPE_CONTRA = "CV"

    VOUCHER_TYPES = [
        (TYPE_JOURNAL, "Journal Voucher"),
        (TYPE_PAYMENT, "Payment Voucher"),
        (TYPE_RECEIPT, "Receipt Voucher"),
        (TYPE_CONTRA, "Contra Voucher"),
    ]

    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"
    STATUS_VOID = "void"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_VOID, "Void"),
    ]

    REF_INVOICE = "invoice"
    REF_PAYMENT = "payment"
    REF_RECEIPT = "receipt"
    REF_PURCHASE = "purchase"
    REF_WALK_IN_SALE = "walk_in_sale"
    REF_MANUAL = "manual"
    REF_OTHER = "other"

    REFERENCE_TYPES = [
        (REF_INVOICE, "Sales Invoice"),
        (REF_PAYMENT, "Payment"),
        (REF_RECEIPT, "Receipt"),
        (REF_PURCHASE, "Purchase Invoice"),
        (REF_WALK_IN_SALE, "Walk-in Sale"),
        (REF_MANUAL, "Manual"),
        (REF_OTHER, "Other"),
    ]

    # Fields that may still change once a voucher has left draft.
    STATUS_METADATA_FIELDS = frozenset(
        {
            "status",
            "posted_by",
            "posted_at",
            "voided_by",
            "voided_at",
            "void_reason",
            "updated_at",
        }
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.CharField(max_length=64, db_index=True)

    voucher_number = models.CharField(max_length=32)
    voucher_type = models.CharField(max_length=2, choices=VOUCHER_TYPES)
    voucher_date = models.DateField(default=timezone.localdate)

    fiscal_year = models.CharField(max_length=4, blank=True, editable=False)
    fiscal_period = models.CharField(max_length=7, blank=True, editable=False)

    narration = models.TextField()

    reference_type = models.CharField(
        max_length=20,
        choices=REFERENCE_TYPES,
        default=REF_MANUAL,
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")
    reference_number = models.CharField(max_length=64, blank=True, default="")

    total_debit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    total_credit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_DRAFT)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers_created",
    )
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers_posted",
    )
    posted_at = models.DateTimeField(null=True, blank=True)

    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vouchers_voided",
    )
    voided_at = models.DateTimeField(null=True, blank=True)
    void_reason = models.CharField(max_length=500, blank=True, default="")

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active_objects = ActiveVoucherManager()

    class Meta:
        ordering = ["-voucher_date", "-created_at"]
        verbose_name = "Voucher"
        verbose_name_plural = "Vouchers"
        indexes = [
            models.Index(fields=["organization_id", "voucher_date"], name="voucher_org_date_idx"),
            models.Index(fields=["organization_id", "status"], name="voucher_org_status_idx"),
            models.Index(fields=["organization_id", "voucher_type", "fiscal_year"], name="voucher_org_type_fy_idx"),
            models.Index(fields=["organization_id", "fiscal_year", "fiscal_period"], name="voucher_org_period_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="voucher_reference_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "voucher_number"],
                name="uniq_voucher_org_number",
            ),
            models.CheckConstraint(
                condition=Q(status="draft") | Q(posted_at__isnull=False),
                name="chk_voucher_posted_requires_posted_at",
            ),
            models.CheckConstraint(
                condition=~Q(status="void") | Q(voided_at__isnull=False),
                name="chk_voucher_void_requires_voided_at",
            ),
        ]
        permissions = [
            ("post_voucher", "Can post voucher to the ledger"),
            ("void_voucher", "Can void posted voucher"),
        ]

    def __str__(self):
        return f"{self.voucher_number} ({self.status})"

    @staticmethod
    def fiscal_year_for(voucher_date) -> str:
        return f"{voucher_date.year:04d}"

    @staticmethod
    def fiscal_period_for(voucher_date) -> str:
        return f"{voucher_date.year:04d}-{voucher_date.month:02d}"

    @property
    def is_draft(self) -> bool:
        return self.status == self.STATUS_DRAFT

    def _stored_status(self) -> str | None:
        if not self.pk or self._state.adding:
            return None
        return (
            type(self).objects.filter(pk=self.pk)
            .values_list("status", flat=True)
            .first()
        )

    def clean(self):
        self.narration = (self.narration or "").strip()

        min_len = getattr(settings, "VOUCHER_NARRATION_MIN_LENGTH", 5)
        max_len = getattr(settings, "VOUCHER_NARRATION_MAX_LENGTH", 1000)
        if len(self.narration) < min_len:
            raise ValidationError(
                {"narration": f"Narration must be at least {min_len} characters"}
            )
        if len(self.narration) > max_len:
            raise ValidationError(
                {"narration": f"Narration cannot exceed {max_len} characters"}
            )

        if self.voucher_date:
            self.fiscal_year = self.fiscal_year_for(self.voucher_date)
            self.fiscal_period = self.fiscal_period_for(self.voucher_date)

        if self.status == self.STATUS_VOID and not (self.void_reason or "").strip():
            raise ValidationError({"void_reason": "void_reason is required for void vouchers"})

    def save(self, *args, **kwargs):
        stored = self._stored_status()
        if stored is not None and stored != self.STATUS_DRAFT:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or not set(update_fields) <= self.STATUS_METADATA_FIELDS:
                raise ValidationError(
                    f"Voucher {self.voucher_number} is {stored}; only status metadata can change"
                )
            if stored == self.STATUS_VOID:
                raise ValidationError(f"Voucher {self.voucher_number} is void and cannot change")

        if kwargs.get("update_fields") is not None:
            # Partial saves (status transitions, soft delete) skip full_clean.
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        stored = self._stored_status()
        if stored is not None and stored != self.STATUS_DRAFT:
            raise ValidationError(f"Voucher {self.voucher_number} is {stored} and cannot be deleted")
        return super().delete(*args, **kwargs)


class VoucherLine(models.Model):
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_number = models.PositiveIntegerField()

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="voucher_lines",
    )

    entry_type = models.CharField(max_length=6, choices=EntryType.choices)
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["voucher", "line_number"]
        verbose_name = "Voucher Line"
        verbose_name_plural = "Voucher Lines"
        constraints = [
            models.UniqueConstraint(
                fields=["voucher", "line_number"],
                name="uniq_voucher_line_number",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="chk_voucher_line_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} → {self.account}"

    @property
    def debit(self) -> Decimal:
        return self.amount if self.entry_type == EntryType.DEBIT else Decimal("0.00")

    @property
    def credit(self) -> Decimal:
        return self.amount if self.entry_type == EntryType.CREDIT else Decimal("0.00")

    def _voucher_is_locked(self) -> bool:
        if not self.voucher_id:
            return False
        status = (
            Voucher.objects.filter(pk=self.voucher_id)
            .values_list("status", flat=True)
            .first()
        )
        return status is not None and status != Voucher.STATUS_DRAFT

    def save(self, *args, **kwargs):
        if self._voucher_is_locked():
            raise ValidationError("Lines of a posted or void voucher are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self._voucher_is_locked():
            raise ValidationError("Lines of a posted or void voucher cannot be deleted")
        return super().delete(*args, **kwargs)
