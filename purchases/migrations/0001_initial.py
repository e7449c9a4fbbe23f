"""
======================================================
PATH: purchases/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Supplier + PurchaseInvoice
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
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
            name="Supplier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("organization_id", models.CharField(db_index=True, max_length=64)),
                ("name", models.CharField(max_length=200)),
                ("ntn", models.CharField(blank=True, default="", max_length=32)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "payable_account",
                    models.ForeignKey(
                        blank=True,
                        help_text="Optional supplier-specific payable account",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="suppliers",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["organization_id", "name"], name="supplier_org_name_idx"),
                    models.Index(fields=["organization_id", "is_active"], name="supplier_org_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseInvoice",
            fields=document_fields()
            + [
                ("invoice_number", models.CharField(max_length=64)),
                ("invoice_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                (
                    "supplier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="purchases.supplier",
                    ),
                ),
                ("purchase_account", account_fk("purchase_invoices_purchase")),
                ("tax_account", account_fk("purchase_invoices_tax")),
                ("payable_account", account_fk("purchase_invoices_payable")),
            ],
            options={
                "verbose_name": "Purchase Invoice",
                "verbose_name_plural": "Purchase Invoices",
                "ordering": ["-invoice_date", "-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["organization_id", "status"], name="purch_inv_org_status_idx"),
                    models.Index(fields=["organization_id", "invoice_date"], name="purch_inv_org_date_idx"),
                    models.Index(fields=["supplier", "invoice_number"], name="purch_inv_supplier_no_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("supplier", "invoice_number"),
                        name="uniq_supplier_invoice_number",
                    ),
                ],
            },
        ),
    ]
