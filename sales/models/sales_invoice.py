# sales/models/sales_invoice.py

from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument


class SalesInvoice(PostableDocument):
    """
    Credit sale to a customer.

    Posting (JV):
    - debit Accounts Receivable   total_amount
    - credit Sales Revenue        taxable + shipping + other charges
    - credit Sales Tax Payable    total_tax (when > 0)

    receivable_account / revenue_account / tax_account are optional
    overrides before posting and the accounts actually used afterwards.
    """

    account_fields = ("receivable_account", "revenue_account", "tax_account")

    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)

    customer_name = models.CharField(max_length=200)
    customer_ntn = models.CharField(max_length=32, blank=True, default="")
    customer_address = models.TextField(blank=True, default="")

    receivable_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_invoices_receivable",
    )
    revenue_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_invoices_revenue",
    )
    tax_account = models.ForeignKey(
        "accounting.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_invoices_tax",
    )

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        verbose_name = "Sales Invoice"
        verbose_name_plural = "Sales Invoices"
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "invoice_number"],
                name="uniq_sales_invoice_org_number",
            ),
        ]
        indexes = [
            models.Index(fields=["organization_id", "status"], name="sales_inv_org_status_idx"),
            models.Index(fields=["organization_id", "invoice_date"], name="sales_inv_org_date_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.customer_name})"
