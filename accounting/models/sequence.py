# accounting/models/sequence.py

"""
======================================================
PATH: accounting/models/sequence.py
======================================================
VOUCHER SEQUENCE MODEL

Persistent monotonic counter per (organization, voucher type, fiscal year).

The numbering service locks the row (select_for_update) and increments
last_number inside the caller's transaction, so numbers survive
multi-instance deployments and are never handed out twice.
"""

from __future__ import annotations

from django.db import models

from accounting.models.voucher import Voucher


class VoucherSequence(models.Model):
    organization_id = models.CharField(max_length=64)
    voucher_type = models.CharField(max_length=2, choices=Voucher.VOUCHER_TYPES)
    fiscal_year = models.CharField(max_length=4)

    last_number = models.PositiveIntegerField(
        default=0,
        help_text="The last sequence number handed out in this scope",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Voucher Sequence"
        verbose_name_plural = "Voucher Sequences"
        ordering = ["organization_id", "fiscal_year", "voucher_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "voucher_type", "fiscal_year"],
                name="uniq_voucher_sequence_scope",
            )
        ]

    def __str__(self):
        return f"{self.voucher_type}-{self.fiscal_year} @ {self.last_number} ({self.organization_id})"

    def format_number(self, number: int) -> str:
        return f"{self.voucher_type}-{self.fiscal_year}-{number:04d}"
