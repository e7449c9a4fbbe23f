# purchases/models.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument


class Supplier(models.Model):
    """
    Supplier master (per organization).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.CharField(max_length=64, db_index=True)

    name = models.CharField(max_length=200)
    ntn = models.CharField(max_length=32, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    payable_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="suppliers",
        help_text="Optional supplier-specific payable account",
    )

    current_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
        help_text="Amount owed to the supplier; moved by invoice posting and cancellation",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["organization_id", "name"], name="supplier_org_name_idx"),
            models.Index(fields=["organization_id", "is_active"], name="supplier_org_active_idx"),
        ]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})
        if self.payable_account_id and self.payable_account.organization_id != self.organization_id:
            raise ValidationError({"payable_account": "Account must belong to the same organization"})

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()

        # current_balance belongs to invoice posting; keep the stored value on edits.
        if not self._state.adding and kwargs.get("update_fields") is None:
            stored = type(self).objects.filter(pk=self.pk).values_list("current_balance", flat=True).first()
            if stored is not None:
                self.current_balance = stored

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class PurchaseInvoice(PostableDocument):
    """
    Supplier invoice header.

    Posting (JV) happens through accounting.services.posting:
    - debit Purchases            taxable + shipping + other charges
    - debit Input Tax            total_tax (when > 0)
    - credit Accounts Payable    total_amount

    purchase_account / tax_account / payable_account are optional overrides
    before posting and the accounts actually used afterwards.
    """

    account_fields = ("purchase_account", "tax_account", "payable_account")

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    purchase_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_invoices_purchase",
    )
    tax_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_invoices_tax",
    )
    payable_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_invoices_payable",
    )

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        verbose_name = "Purchase Invoice"
        verbose_name_plural = "Purchase Invoices"
        constraints = [
            models.UniqueConstraint(
                fields=["supplier", "invoice_number"],
                name="uniq_supplier_invoice_number",
            ),
        ]
        indexes = [
            models.Index(fields=["organization_id", "status"], name="purch_inv_org_status_idx"),
            models.Index(fields=["organization_id", "invoice_date"], name="purch_inv_org_date_idx"),
            models.Index(fields=["supplier", "invoice_number"], name="purch_inv_supplier_no_idx"),
        ]

    def number_scope(self) -> dict:
        return {"supplier_id": self.supplier_id}

    def balance_party(self):
        return self.supplier

    def clean(self):
        super().clean()
        if self.supplier_id and self.supplier.organization_id != self.organization_id:
            raise ValidationError({"supplier": "Supplier must belong to the same organization"})

    def __str__(self):
        return f"{self.invoice_number} ({self.supplier.name})"
