# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER ENTRY MODEL

Atomic debit or credit posting to a single account, spawned by a voucher.

Guarantees:
- Append-only: account, entry_type, amount and every snapshot column are
  frozen once created; only the void markers (status, voided_at, voided_by,
  void_reason) can be set afterwards
- Never deleted
- Amount is always positive; direction is via entry_type
- A reversal entry points at the original entry it offsets (reversal_of)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.account import Account
from accounting.models.voucher import EntryType, Voucher


class LedgerEntry(models.Model):
    DEBIT = EntryType.DEBIT
    CREDIT = EntryType.CREDIT

    STATUS_ACTIVE = "active"
    STATUS_VOID = "void"
    STATUS_REVERSAL = "reversal"

    STATUSES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_VOID, "Void"),
        (STATUS_REVERSAL, "Reversal"),
    ]

    VOID_MARKER_FIELDS = frozenset({"status", "voided_at", "voided_by", "void_reason"})

    organization_id = models.CharField(max_length=64, db_index=True)

    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    line_number = models.PositiveIntegerField(default=0)

    entry_type = models.CharField(max_length=6, choices=EntryType.choices)
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )
    running_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Account balance right after this entry was applied",
    )

    # Voucher snapshot (reporting without joins)
    voucher_number = models.CharField(max_length=32)
    voucher_type = models.CharField(max_length=2, choices=Voucher.VOUCHER_TYPES)
    entry_date = models.DateField()
    fiscal_year = models.CharField(max_length=4)
    fiscal_period = models.CharField(max_length=7)

    description = models.CharField(max_length=255, blank=True, default="")
    narration = models.TextField(blank=True, default="")
    reference_type = models.CharField(max_length=20, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_ACTIVE)
    reversal_of = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversal_entry",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    voided_at = models.DateTimeField(null=True, blank=True)
    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries_voided",
    )
    void_reason = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["entry_date", "created_at", "id"]
        indexes = [
            models.Index(fields=["voucher"], name="ledger_voucher_idx"),
            models.Index(fields=["account", "created_at"], name="ledger_account_created_idx"),
            models.Index(fields=["organization_id", "account", "entry_date"], name="ledger_org_acct_date_idx"),
            models.Index(fields=["organization_id", "fiscal_year", "fiscal_period"], name="ledger_org_period_idx"),
            models.Index(fields=["organization_id", "account", "status"], name="ledger_org_acct_status_idx"),
            models.Index(fields=["voucher_number"], name="ledger_voucher_number_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="chk_ledger_amount_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(status="reversal", reversal_of__isnull=False)
                | (~models.Q(status="reversal") & models.Q(reversal_of__isnull=True)),
                name="chk_ledger_reversal_links_original",
            ),
        ]

    def __str__(self):
        return f"{self.entry_type} {self.amount} → {self.account}"

    @property
    def is_reversal(self) -> bool:
        return self.reversal_of_id is not None

    @property
    def debit(self) -> Decimal:
        return self.amount if self.entry_type == self.DEBIT else Decimal("0.00")

    @property
    def credit(self) -> Decimal:
        return self.amount if self.entry_type == self.CREDIT else Decimal("0.00")

    def clean(self):
        if self.entry_type not in (self.DEBIT, self.CREDIT):
            raise ValidationError("Invalid entry_type")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or not set(update_fields) <= self.VOID_MARKER_FIELDS:
                raise ValidationError("LedgerEntry records are append-only; only void markers can change")
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")

    def mark_voided(self, *, user, reason: str, at) -> None:
        self.status = self.STATUS_VOID
        self.voided_by = user
        self.voided_at = at
        self.void_reason = reason
        self.save(update_fields=["status", "voided_at", "voided_by", "void_reason"])
