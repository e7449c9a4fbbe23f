# sales/models/walk_in_sale.py

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument


class WalkInSale(PostableDocument):
    """
    Counter (cash) sale with no customer account.

    Posting (RV):
    - debit Cash in Hand          total_amount
    - credit Sales Revenue        taxable + other charges
    - credit Sales Tax Payable    total_tax (when > 0)

    Walk-in sales carry no shipping; shipping_charges must stay 0.
    """

    document_number_field = "sale_number"
    document_date_field = "sale_date"
    account_fields = ("cash_account", "revenue_account", "tax_account")

    sale_number = models.CharField(max_length=64)
    sale_date = models.DateField(default=timezone.localdate)

    customer_name = models.CharField(max_length=200, blank=True, default="Walk-in Customer")
    customer_phone = models.CharField(max_length=50, blank=True, default="")

    cash_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="walk_in_sales_cash",
    )
    revenue_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="walk_in_sales_revenue",
    )
    tax_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="walk_in_sales_tax",
    )

    class Meta:
        ordering = ["-sale_date", "-created_at"]
        verbose_name = "Walk-in Sale"
        verbose_name_plural = "Walk-in Sales"
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "sale_number"],
                name="uniq_walk_in_sale_org_number",
            ),
        ]
        indexes = [
            models.Index(fields=["organization_id", "status"], name="walk_in_org_status_idx"),
            models.Index(fields=["organization_id", "sale_date"], name="walk_in_org_date_idx"),
        ]

    def clean(self):
        super().clean()
        if self.shipping_charges:
            raise ValidationError({"shipping_charges": "Walk-in sales carry no shipping charges"})

    def __str__(self):
        return f"{self.sale_number} ({self.customer_name or 'Walk-in'})"
