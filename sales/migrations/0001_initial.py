"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: CREATE SalesInvoice + WalkInSale (POSTABLE DOCUMENTS)
"""

from __future__ import annotations

import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

from accounting.migrations._document_fields import account_fk, document_fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SalesInvoice",
            fields=document_fields()
            + [
                ("invoice_number", models.CharField(max_length=64)),
                ("invoice_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("customer_name", models.CharField(max_length=200)),
                ("customer_ntn", models.CharField(blank=True, default="", max_length=32)),
                ("customer_address", models.TextField(blank=True, default="")),
                ("receivable_account", account_fk("sales_invoices_receivable")),
                ("revenue_account", account_fk("sales_invoices_revenue")),
                ("tax_account", account_fk("sales_invoices_tax")),
            ],
            options={
                "verbose_name": "Sales Invoice",
                "verbose_name_plural": "Sales Invoices",
                "ordering": ["-invoice_date", "-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["organization_id", "status"], name="sales_inv_org_status_idx"),
                    models.Index(fields=["organization_id", "invoice_date"], name="sales_inv_org_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization_id", "invoice_number"),
                        name="uniq_sales_invoice_org_number",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WalkInSale",
            fields=document_fields()
            + [
                ("sale_number", models.CharField(max_length=64)),
                ("sale_date", models.DateField(default=django.utils.timezone.localdate)),
                ("customer_name", models.CharField(blank=True, default="Walk-in Customer", max_length=200)),
                ("customer_phone", models.CharField(blank=True, default="", max_length=50)),
                ("cash_account", account_fk("walk_in_sales_cash")),
                ("revenue_account", account_fk("walk_in_sales_revenue")),
                ("tax_account", account_fk("walk_in_sales_tax")),
            ],
            options={
                "verbose_name": "Walk-in Sale",
                "verbose_name_plural": "Walk-in Sales",
                "ordering": ["-sale_date", "-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["organization_id", "status"], name="walk_in_org_status_idx"),
                    models.Index(fields=["organization_id", "sale_date"], name="walk_in_org_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization_id", "sale_number"),
                        name="uniq_walk_in_sale_org_number",
                    ),
                ],
            },
        ),
    ]
